"""
Asset download with bounded retry and exclusive temporary files.

Every attempt streams the response body into a fresh, uniquely named file
(``uuid4`` hex) in the scratch directory. The file is opened with exclusive
create, so a name collision with another job sharing the scratch volume is a
hard error instead of a silent overwrite.
"""

import logging
import time
import uuid
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple, Type, TypeVar

import requests
from requests.exceptions import RequestException

from gitopskit.core.exceptions import DownloadCollisionError, DownloadError

logger = logging.getLogger(__name__)

T = TypeVar("T")

CHUNK_SIZE = 8192


class IncompleteDownloadError(DownloadError):
    """Raised when fewer bytes were received than the server announced."""

    pass


def retry_with_backoff(
    operation: Callable[[], T],
    max_retries: int = 3,
    retry_on: Tuple[Type[BaseException], ...] = (RequestException,),
    backoff_base: float = 1.0,
    description: str = "operation",
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run an operation, retrying with exponential backoff on selected errors.

    Args:
        operation: Zero-argument callable to run
        max_retries: Total number of attempts (1 disables retrying)
        retry_on: Exception types that trigger another attempt
        backoff_base: Delay before the second attempt; doubles each time
        description: Label used in log messages
        sleep: Sleep function (injectable for tests)

    Returns:
        Result of the first successful attempt

    Raises:
        The last exception raised by the operation once attempts run out.
        Exceptions outside ``retry_on`` propagate immediately.
    """
    attempts = max(1, max_retries)

    for attempt in range(attempts):
        try:
            return operation()
        except retry_on as e:
            if attempt == attempts - 1:
                raise

            # Exponential backoff
            backoff_seconds = backoff_base * 2**attempt
            logger.warning(
                f"{description} attempt {attempt + 1} failed: {e}. "
                f"Retrying in {backoff_seconds:g}s..."
            )
            sleep(backoff_seconds)

    # Should never reach here, but just in case
    raise DownloadError(f"{description} failed for unknown reason")


def download_to_temp(
    url: str,
    scratch_dir: Path,
    headers: Optional[Dict[str, str]] = None,
    timeout: int = 30,
    max_retries: int = 3,
) -> Path:
    """
    Download a URL into a new uniquely named file in ``scratch_dir``.

    Args:
        url: Asset URL
        scratch_dir: Directory for the temporary file
        headers: Extra request headers (an octet-stream Accept is always sent)
        timeout: Per-request timeout in seconds
        max_retries: Total number of attempts for transient failures

    Returns:
        Path to the fully written temporary file

    Raises:
        DownloadCollisionError: If the temporary path already exists
        DownloadError: If the download fails after all attempts, or at once on
            a client error status
        ValueError: If the URL is empty

    Example:
        >>> path = download_to_temp(asset_url, Path("/tmp"))
        >>> install_binary(path, Path("~/.gitops-cli/bin/gitops").expanduser())
    """
    if not url:
        raise ValueError("URL cannot be empty")

    scratch_dir = Path(scratch_dir)
    request_headers = {"Accept": "application/octet-stream"}
    if headers:
        request_headers.update(headers)

    try:
        return retry_with_backoff(
            lambda: _download_once(url, scratch_dir, request_headers, timeout),
            max_retries=max_retries,
            retry_on=(RequestException, IncompleteDownloadError),
            description="Download",
        )
    except RequestException as e:
        raise DownloadError(
            f"Download of {url} failed after {max(1, max_retries)} attempts: {e}"
        ) from e
    except OSError as e:
        raise DownloadError(f"Failed to write download of {url}: {e}") from e


def _download_once(
    url: str, scratch_dir: Path, headers: Dict[str, str], timeout: int
) -> Path:
    """
    Perform a single streaming download attempt.

    The partial file is removed when the attempt fails after the file was
    created.
    """
    destination = scratch_dir / uuid.uuid4().hex

    logger.debug(f"Downloading {url} to {destination}")

    response = requests.get(
        url, headers=headers, stream=True, timeout=timeout, allow_redirects=True
    )
    with response:
        # Client errors will not change on retry
        if 400 <= response.status_code < 500:
            raise DownloadError(
                f"Download of {url} failed: HTTP {response.status_code}"
            )
        response.raise_for_status()

        try:
            f = open(destination, "xb")
        except FileExistsError as e:
            raise DownloadCollisionError(destination) from e

        written = 0
        try:
            with f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
                        written += len(chunk)
                f.flush()

            expected = _expected_length(response)
            if expected is not None and written != expected:
                raise IncompleteDownloadError(
                    f"Incomplete download of {url}: got {written} of {expected} bytes"
                )
        except BaseException:
            destination.unlink(missing_ok=True)
            raise

    logger.info(f"Download complete: {destination} ({written} bytes)")
    return destination


def _expected_length(response) -> Optional[int]:
    """Announced body length, or None when unknown or content-encoded."""
    if response.headers.get("content-encoding"):
        return None
    content_length = response.headers.get("content-length")
    if not content_length:
        return None
    try:
        return int(content_length)
    except ValueError:
        return None


__all__ = [
    "IncompleteDownloadError",
    "retry_with_backoff",
    "download_to_temp",
]
