"""Image formats handled by ImageMagick."""

from morphit.formats.models import ImageFormat

IMAGE_FORMATS: dict[str, ImageFormat] = {
    fmt.id: fmt
    for fmt in (
        ImageFormat(
            id="jpeg",
            extension="jpg",
            display_name="JPEG",
            description=(
                "Widely supported lossy format with good compression. "
                "Ideal for photos and images with many colors."
            ),
            lossy=True,
            supports_exif=True,
        ),
        ImageFormat(
            id="png",
            extension="png",
            display_name="PNG",
            description=(
                "Lossless format ideal for images with sharp edges, text, "
                "or transparent backgrounds."
            ),
            supports_transparency=True,
            defines=("png:compression-level=9",),
        ),
        ImageFormat(
            id="gif",
            extension="gif",
            display_name="GIF",
            description=(
                "Supports 256 colors with animation and transparency, "
                "ideal for simple graphics and animations."
            ),
            supports_transparency=True,
            supports_animation=True,
        ),
        ImageFormat(
            id="bmp",
            extension="bmp",
            display_name="BMP",
            description=(
                "Uncompressed format with large file sizes. "
                "Widely supported but inefficient for storage."
            ),
            defines=("bmp:format=bmp3",),
        ),
        ImageFormat(
            id="tiff",
            extension="tif",
            display_name="TIFF",
            description=(
                "Lossless with extensive metadata capabilities, "
                "widely used in publishing and photography."
            ),
            supports_exif=True,
            supports_transparency=True,
        ),
        ImageFormat(
            id="webp",
            extension="webp",
            display_name="WebP",
            description=(
                "Modern format with excellent compression, "
                "supporting both lossy and lossless modes."
            ),
            lossy=True,
            supports_transparency=True,
            supports_animation=True,
            defines=("webp:lossless=false",),
        ),
        ImageFormat(
            id="pdf",
            extension="pdf",
            display_name="PDF (Image)",
            description="Document format that can contain images and vector graphics.",
            requires_dpi=True,
        ),
        ImageFormat(
            id="svg",
            extension="svg",
            display_name="SVG",
            description=(
                "Scalable vector format ideal for logos and simple graphics. "
                "Maintains quality at any size."
            ),
            supports_transparency=True,
        ),
        ImageFormat(
            id="ico",
            extension="ico",
            display_name="ICO",
            description=(
                "Windows icon format supporting multiple sizes and transparency. "
                "Used for application icons."
            ),
            supports_transparency=True,
        ),
        # Read-only inputs
        ImageFormat(
            id="heic",
            extension="heic",
            display_name="HEIC",
            lossy=True,
            writable=False,
            supports_exif=True,
        ),
        ImageFormat(
            id="heif",
            extension="heif",
            display_name="HEIF",
            lossy=True,
            writable=False,
            supports_exif=True,
        ),
    )
}

# PDF is only detected as an image in an all-PDF batch; see FormatRegistry.detect
IMAGE_EXTENSIONS: dict[str, str] = {
    "jpg": "jpeg",
    "jpeg": "jpeg",
    "png": "png",
    "gif": "gif",
    "bmp": "bmp",
    "tif": "tiff",
    "tiff": "tiff",
    "webp": "webp",
    "svg": "svg",
    "ico": "ico",
    "heic": "heic",
    "heif": "heif",
}

# Outputs whose EXIF block can be stripped while keeping orientation
EXIF_STRIP_EXTENSIONS = frozenset({"jpg", "jpeg", "tiff", "tif", "heic", "heif"})


def writable_image_formats() -> frozenset[ImageFormat]:
    """Return every image format the backend can write."""
    return frozenset(fmt for fmt in IMAGE_FORMATS.values() if fmt.writable)


# All-PDF batches can also be combined page by page into one document
MERGED_PDF = ImageFormat(
    id="pdf-merge",
    extension="pdf",
    display_name="PDF (Merged)",
    description="Combine all selected PDFs into one document, in order.",
    writable=False,
)
