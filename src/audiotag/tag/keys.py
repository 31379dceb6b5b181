"""Tag types and the canonical item keys shared by every format."""

from enum import Enum
from typing import Optional


class TagType(Enum):
    """The physical tag formats understood by the engine."""

    ID3V1 = "Id3v1"
    ID3V2 = "Id3v2"
    APE = "Ape"
    MP4_ILST = "Mp4Ilst"
    RIFF_INFO = "RiffInfo"
    VORBIS_COMMENTS = "VorbisComments"
    AIFF_TEXT = "AiffText"

    @classmethod
    def from_name(cls, name: str) -> "TagType":
        """Look up a tag type by value or member name, ignoring case and '_'/'-'.

        Raises:
            ValueError: If no tag type matches
        """
        wanted = name.replace("_", "").replace("-", "").lower()
        for member in cls:
            if wanted in (member.value.lower(), member.name.replace("_", "").lower()):
                return member
        raise ValueError(f"Unknown tag type: {name}")

    @property
    def supports_binary(self) -> bool:
        return self in (TagType.ID3V2, TagType.APE, TagType.MP4_ILST)

    @property
    def supports_pictures(self) -> bool:
        return self in (
            TagType.ID3V2,
            TagType.APE,
            TagType.MP4_ILST,
            TagType.VORBIS_COMMENTS,
        )


class ItemKey(Enum):
    """Container independent metadata field names.

    Fields that have no canonical name are carried as the raw per-format key
    (a plain ``str``) instead of an ItemKey member.
    """

    # Titles
    ALBUM_TITLE = "AlbumTitle"
    SET_SUBTITLE = "SetSubtitle"
    SHOW_NAME = "ShowName"
    CONTENT_GROUP = "ContentGroup"
    TRACK_TITLE = "TrackTitle"
    TRACK_SUBTITLE = "TrackSubtitle"

    # Original names
    ORIGINAL_ALBUM_TITLE = "OriginalAlbumTitle"
    ORIGINAL_ARTIST = "OriginalArtist"
    ORIGINAL_LYRICIST = "OriginalLyricist"

    # Sorting
    ALBUM_TITLE_SORT_ORDER = "AlbumTitleSortOrder"
    ALBUM_ARTIST_SORT_ORDER = "AlbumArtistSortOrder"
    TRACK_TITLE_SORT_ORDER = "TrackTitleSortOrder"
    TRACK_ARTIST_SORT_ORDER = "TrackArtistSortOrder"
    SHOW_NAME_SORT_ORDER = "ShowNameSortOrder"
    COMPOSER_SORT_ORDER = "ComposerSortOrder"

    # People & Organizations
    ALBUM_ARTIST = "AlbumArtist"
    TRACK_ARTIST = "TrackArtist"
    ARRANGER = "Arranger"
    WRITER = "Writer"
    COMPOSER = "Composer"
    CONDUCTOR = "Conductor"
    ENGINEER = "Engineer"
    INVOLVED_PEOPLE = "InvolvedPeople"
    LYRICIST = "Lyricist"
    MIX_DJ = "MixDj"
    MIX_ENGINEER = "MixEngineer"
    MUSICIAN_CREDITS = "MusicianCredits"
    PERFORMER = "Performer"
    PRODUCER = "Producer"
    PUBLISHER = "Publisher"
    LABEL = "Label"
    INTERNET_RADIO_STATION_NAME = "InternetRadioStationName"
    INTERNET_RADIO_STATION_OWNER = "InternetRadioStationOwner"
    REMIXER = "Remixer"

    # Counts & Indexes
    DISC_NUMBER = "DiscNumber"
    DISC_TOTAL = "DiscTotal"
    TRACK_NUMBER = "TrackNumber"
    TRACK_TOTAL = "TrackTotal"
    POPULARIMETER = "Popularimeter"
    LAW_RATING = "LawRating"

    # Dates
    RECORDING_DATE = "RecordingDate"
    YEAR = "Year"
    ORIGINAL_RELEASE_DATE = "OriginalReleaseDate"

    # Identifiers
    ISRC = "Isrc"
    BARCODE = "Barcode"
    CATALOG_NUMBER = "CatalogNumber"
    MOVEMENT = "Movement"
    MOVEMENT_INDEX = "MovementIndex"

    # Flags
    FLAG_COMPILATION = "FlagCompilation"
    FLAG_PODCAST = "FlagPodcast"

    # File information
    FILE_TYPE = "FileType"
    FILE_OWNER = "FileOwner"
    TAGGING_TIME = "TaggingTime"
    LENGTH = "Length"
    ORIGINAL_FILE_NAME = "OriginalFileName"
    ORIGINAL_MEDIA_TYPE = "OriginalMediaType"

    # Encoder information
    ENCODED_BY = "EncodedBy"
    ENCODER_SOFTWARE = "EncoderSoftware"
    ENCODER_SETTINGS = "EncoderSettings"
    ENCODING_TIME = "EncodingTime"

    # URLs
    AUDIO_FILE_URL = "AudioFileUrl"
    AUDIO_SOURCE_URL = "AudioSourceUrl"
    COMMERCIAL_INFORMATION_URL = "CommercialInformationUrl"
    COPYRIGHT_URL = "CopyrightUrl"
    TRACK_ARTIST_URL = "TrackArtistUrl"
    RADIO_STATION_URL = "RadioStationUrl"
    PAYMENT_URL = "PaymentUrl"
    PUBLISHER_URL = "PublisherUrl"

    # Style
    GENRE = "Genre"
    INITIAL_KEY = "InitialKey"
    MOOD = "Mood"
    BPM = "Bpm"

    # Legal
    COPYRIGHT_MESSAGE = "CopyrightMessage"
    LICENSE = "License"

    # Podcast
    PODCAST_DESCRIPTION = "PodcastDescription"
    PODCAST_SERIES_CATEGORY = "PodcastSeriesCategory"
    PODCAST_URL = "PodcastUrl"
    PODCAST_RELEASE_DATE = "PodcastReleaseDate"
    PODCAST_GLOBAL_UNIQUE_ID = "PodcastGlobalUniqueId"
    PODCAST_KEYWORDS = "PodcastKeywords"

    # Miscellaneous
    COMMENT = "Comment"
    DESCRIPTION = "Description"
    LANGUAGE = "Language"
    SCRIPT = "Script"
    LYRICS = "Lyrics"
    PICTURE = "Picture"

    @classmethod
    def from_name(cls, name: str) -> Optional["ItemKey"]:
        """Find an ItemKey by member name, value or common alias.

        Matching ignores case, '_', '-' and spaces. Returns None when nothing
        matches.
        """
        wanted = "".join(c for c in name.lower() if c not in "_- ")
        if wanted in _ALIASES:
            return _ALIASES[wanted]
        for member in cls:
            if wanted in (member.value.lower(), member.name.replace("_", "").lower()):
                return member
        return None


_ALIASES = {
    "title": ItemKey.TRACK_TITLE,
    "artist": ItemKey.TRACK_ARTIST,
    "album": ItemKey.ALBUM_TITLE,
    "albumartist": ItemKey.ALBUM_ARTIST,
    "date": ItemKey.RECORDING_DATE,
    "track": ItemKey.TRACK_NUMBER,
    "tracknumber": ItemKey.TRACK_NUMBER,
    "totaltracks": ItemKey.TRACK_TOTAL,
    "disc": ItemKey.DISC_NUMBER,
    "discnumber": ItemKey.DISC_NUMBER,
    "totaldiscs": ItemKey.DISC_TOTAL,
    "copyright": ItemKey.COPYRIGHT_MESSAGE,
}

# Keys that share one physical "number/total" field in several formats
PAIRED_KEYS = {
    ItemKey.TRACK_NUMBER: ItemKey.TRACK_TOTAL,
    ItemKey.DISC_NUMBER: ItemKey.DISC_TOTAL,
}
