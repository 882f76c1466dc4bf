from app.utils.base.enums import MediaField

__all__ = ["MediaField"]
