"""Identity fingerprint for uploaded audio files.

The fingerprint is a keyed hash of the file name and the owner, so the
same user uploading the same file name twice always yields the same key.
Audio content does not take part in it.
"""

import hashlib
import hmac

DEFAULT_SECRET = "file2468"


def compute_file_id(file_name: str, user_id: str, secret: str = DEFAULT_SECRET) -> str:
    """Compute the deterministic file fingerprint.

    Args:
        file_name: Display name of the uploaded file.
        user_id: Identifier of the owning user.
        secret: HMAC key.

    Returns:
        Hex-encoded HMAC-SHA256 of "{file_name}:{user_id}:{secret}".
    """
    message = f"{file_name}:{user_id}:{secret}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()
