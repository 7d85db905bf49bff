"""Audio recognition: Shazam client, track parsing and the enrichment pipeline."""

from .pipeline import RecognitionOutcome, RecognitionPipeline
from .shazam_client import ShazamClient
from .track_parser import RecognizedTrack, parse_track

__all__ = ["RecognitionOutcome", "RecognitionPipeline", "RecognizedTrack", "ShazamClient", "parse_track"]
