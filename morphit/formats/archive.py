"""Archive containers built with zip and tar."""

from morphit.formats.models import ArchiveFormat

ARCHIVE_FORMATS: dict[str, ArchiveFormat] = {
    fmt.id: fmt
    for fmt in (
        ArchiveFormat(
            id="zip",
            extension="zip",
            display_name="ZIP",
            description="Create a compressed ZIP archive containing all selected files.",
        ),
        ArchiveFormat(
            id="tar",
            extension="tar",
            display_name="TAR",
            description="Create an uncompressed TAR archive containing all selected files.",
            tar_flag="-cf",
        ),
        ArchiveFormat(
            id="tar.gz",
            extension="tar.gz",
            display_name="TAR.GZ",
            description="Create a gzip-compressed TAR archive containing all selected files.",
            tar_flag="-czf",
            level_env="GZIP",
        ),
        ArchiveFormat(
            id="tar.xz",
            extension="tar.xz",
            display_name="TAR.XZ",
            description="Create an xz-compressed TAR archive containing all selected files.",
            tar_flag="-cJf",
            level_env="XZ_OPT",
        ),
        ArchiveFormat(
            id="tar.bz2",
            extension="tar.bz2",
            display_name="TAR.BZ2",
            description="Create a bzip2-compressed TAR archive containing all selected files.",
            tar_flag="-cjf",
            level_env="BZIP2",
        ),
    )
}
