from enum import Enum


class MediaField(str, Enum):
    """Account fields that hold a remote image URL."""
    AVATAR = "avatar"
    COVER_IMAGE = "cover_image"

    @property
    def label(self) -> str:
        return "Avatar" if self is MediaField.AVATAR else "CoverImage"
