"""
Remote Image Picker

Asks the backend for one random image matching the category filter, builds the public storage url
for it and downloads its bytes. Also loads the category catalog that the filter is chosen from.

The public url shape is part of the contract with the storage backend and must be produced exactly:

    scheme://host/storage/v1/object/public/<bucket>//<filename>

including the double slash between the bucket and the filename. The filename is percent-encoded as
a single path segment.
"""

import logging
from typing import Iterable, Optional
from urllib.parse import quote

from motivate.backend import BackendClient
from motivate.backend import RemoteError
from motivate.backend import RemoteErrorKind
from motivate.models import Category
from motivate.models import ImageRecord

logger = logging.getLogger(__name__)

STORAGE_PUBLIC_PATH = "storage/v1/object/public/"
DEFAULT_BUCKET = "motivational-images"

RANDOM_IMAGE_RPC = "get_random_image"
CATEGORIES_TABLE = "categories"


def make_public_url(scheme: str, netloc: str, bucket: str, filename: str) -> str:
    """
    Assemble the public object url. Kept as a plain function so the exact shape can be tested
    without a client.
    """

    path = "/" + STORAGE_PUBLIC_PATH + bucket + "//" + quote(filename, safe="")
    return f"{scheme}://{netloc}{path}"


class RemoteImagePicker:
    def __init__(self, client: BackendClient, bucket: str = DEFAULT_BUCKET):
        self.client = client
        self.bucket = bucket

    def fetch_random(self, category_ids: Optional[Iterable[int]] = None) -> ImageRecord:
        """
        Request one random image record. An empty or missing filter is sent as null, which the
        backend treats as fully random. Raises RemoteError.
        """

        ids = sorted(int(category_id) for category_id in category_ids) if category_ids else None

        logger.debug(
            "fetching random image with category ids %s", ids if ids else "None (fully random)"
        )

        result = self.client.rpc(RANDOM_IMAGE_RPC, {"category_ids": ids})

        # PostgREST returns a set-returning function as an array; a scalar composite as an object
        if isinstance(result, list):
            if not result:
                raise RemoteError(RemoteErrorKind.EMPTY, "no image matched the category filter")
            if len(result) > 1:
                raise RemoteError(
                    RemoteErrorKind.DECODE, f"expected exactly one image row, got {len(result)}"
                )
            result = result[0]

        if result is None:
            raise RemoteError(RemoteErrorKind.EMPTY, "no image matched the category filter")

        try:
            record = ImageRecord.from_row(result)

        except (KeyError, TypeError, ValueError) as error:
            raise RemoteError(RemoteErrorKind.DECODE, f"could not decode image row: {error}")

        logger.debug("picked image %d (%s)", record.id, record.filename)
        return record

    def build_public_url(self, filename: str) -> str:
        return make_public_url(self.client.scheme, self.client.netloc, self.bucket, filename)

    def download_bytes(self, url: str) -> bytes:
        """
        Download an object. Anything other than exactly HTTP 200 counts as a failure.
        """

        response = self.client.get(url)

        if response.status_code != 200:
            raise RemoteError(
                RemoteErrorKind.HTTP_STATUS,
                f"download of {url} failed",
                status_code=response.status_code,
            )

        logger.debug("downloaded %d bytes from %s", len(response.content), url)
        return response.content

    def fetch_image(self, category_ids: Optional[Iterable[int]] = None):
        """Pick and download in one go. Returns (record, data)."""

        record = self.fetch_random(category_ids)
        data = self.download_bytes(self.build_public_url(record.filename))
        return record, data

    def fetch_categories(self) -> list:
        """
        Load the whole category catalog ordered by name.
        """

        rows = self.client.select(CATEGORIES_TABLE, order="name")

        try:
            categories = [Category.from_row(row) for row in rows]

        except (KeyError, TypeError, ValueError, AttributeError) as error:
            raise RemoteError(RemoteErrorKind.DECODE, f"could not decode category row: {error}")

        logger.info("fetched %d categories", len(categories))
        return categories
