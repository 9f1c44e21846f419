"""Data structures for uploaded check-in media."""

from dataclasses import dataclass

DEFAULT_VIDEO_MIME = "video/mp4"


@dataclass(slots=True)
class UploadedMedia:
    """Raw upload handed over by the HTTP layer.

    ``content_type`` is informational and only logged; the type sent to the
    provider is derived from the stored file's extension.
    """

    payload: bytes
    filename: str | None = None
    content_type: str | None = None

    @property
    def size_bytes(self) -> int:
        return len(self.payload)


def normalize_video_mime_type(content_type: str | None) -> str:
    """Map client-declared types onto the two formats the provider handles best."""
    if content_type == "video/webm":
        return content_type
    return DEFAULT_VIDEO_MIME
