from .artifact_writer import ArtifactWriter, load_artifact

__all__ = ['ArtifactWriter', 'load_artifact']
