"""Check-in analyzer: clinical video analysis pipeline.

Uploaded check-in videos are stored as short-lived temp files, handed to the
remote analysis provider and turned into a validated ``ClinicalAnalysis``.
"""
