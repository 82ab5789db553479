"""
Batch transcription of audio files with Google Cloud Speech-to-Text.

The package stages local WAV files in a temporary Cloud Storage bucket,
submits long-running recognition requests that reference the staged objects
and writes the recognised text next to each other in an output directory.
Files are processed concurrently and a failure only affects its own file.
"""
