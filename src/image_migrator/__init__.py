"""Migrate product images from inline payloads and remote storage to Cloudinary."""

__version__ = "0.1.0"
