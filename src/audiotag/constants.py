from mutagen.id3 import TCON

# ID3v1 genre table (Winamp extended list). Bytes >= 192 are not genres.
ID3V1_GENRES = tuple(TCON.GENRES[:192])

# Signatures
ID3V2_MAGIC = b"ID3"
ID3V1_MAGIC = b"TAG"
APE_PREAMBLE = b"APETAGEX"
MAC_MAGIC = b"MAC "
FLAC_MAGIC = b"fLaC"
OGG_MAGIC = b"OggS"
RIFF_MAGIC = b"RIFF"
WAVE_MAGIC = b"WAVE"
FORM_MAGIC = b"FORM"
AIFF_FORMS = (b"AIFF", b"AIFC")
MP4_FTYP = b"ftyp"

VORBIS_IDENT_HEAD = b"\x01vorbis"
VORBIS_COMMENT_HEAD = b"\x03vorbis"
VORBIS_SETUP_HEAD = b"\x05vorbis"
OPUS_HEAD = b"OpusHead"
OPUS_TAGS = b"OpusTags"

# Sizes
ID3V1_SIZE = 128
ID3V2_HEADER_SIZE = 10
APE_HEADER_SIZE = 32
SIGNATURE_PROBE_SIZE = 36

# APEv2 tag flags
APE_FLAG_HAS_HEADER = 1 << 31
APE_FLAG_NO_FOOTER = 1 << 30
APE_FLAG_IS_HEADER = 1 << 29
APE_ITEM_READ_ONLY = 1
APE_ITEM_BINARY = 1
APE_ITEM_LOCATOR = 2
APE_INVALID_KEYS = ("ID3", "TAG", "OGGS", "MP+")

# FLAC metadata block types
FLAC_STREAMINFO = 0
FLAC_PADDING = 1
FLAC_VORBIS_COMMENT = 4
FLAC_PICTURE = 6

# MP4 data atom type codes
MP4_TYPE_IMPLICIT = 0
MP4_TYPE_UTF8 = 1
MP4_TYPE_UTF16 = 2
MP4_TYPE_GIF = 12
MP4_TYPE_JPEG = 13
MP4_TYPE_PNG = 14
MP4_TYPE_SIGNED = 21
MP4_TYPE_UNSIGNED = 22
MP4_TYPE_BMP = 27

# Anything larger is treated as hostile rather than allocated
MAX_TAG_SIZE = 125_829_120
