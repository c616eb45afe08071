"""Video acquisition, transcription and voice analysis service."""
