import hashlib

DOCUMENT_EXTENSION = ".md"


def derive_filename(url: str) -> str:
    """Map a URL to a stable single-segment file name.

    The name is the SHA-256 hex digest of the URL plus `.md`. Only surrounding
    whitespace is stripped, so query and fragment variants stay distinct and
    no part of the URL can leak a path separator into the name. Lone
    surrogates (from undecodable sitemap bytes) are encoded as-is, so every
    string maps to a name.
    """
    digest = hashlib.sha256(url.strip().encode("utf-8", errors="surrogatepass")).hexdigest()
    return f"{digest}{DOCUMENT_EXTENSION}"
