"""HTTP and object-storage clients for the record store, the CDN and remote images."""

from .cloudinary_gateway import CloudinaryUploadGateway, parse_upload_response
from .remote_fetch import RemoteImageFetcher
from .supabase_store import SupabaseRecordSource

__all__ = [
    "CloudinaryUploadGateway",
    "parse_upload_response",
    "RemoteImageFetcher",
    "SupabaseRecordSource",
]
