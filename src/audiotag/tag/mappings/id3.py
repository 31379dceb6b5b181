"""ID3v1 and ID3v2 key mappings."""

from ..core import Tag
from ..keys import ItemKey, TagType


def setup_id3_mappings():
    """Register ID3v1 field names and ID3v2.4 frame ids."""

    # ID3v1 has a fixed set of fields, the names are only informational
    # ------------------------------------------------------------------
    Tag.RegisterKeys(TagType.ID3V1, {
        ItemKey.TRACK_TITLE: "title",
        ItemKey.TRACK_ARTIST: "artist",
        ItemKey.ALBUM_TITLE: "album",
        ItemKey.YEAR: "year",
        ItemKey.COMMENT: "comment",
        ItemKey.TRACK_NUMBER: "track",
        ItemKey.GENRE: "genre",
    })

    # ID3v2 frames
    # ------------
    # TRCK and TPOS hold "number/total"; the codec splits and joins them.
    Tag.RegisterKeys(TagType.ID3V2, {
        ItemKey.ALBUM_TITLE: "TALB",
        ItemKey.SET_SUBTITLE: "TSST",
        ItemKey.CONTENT_GROUP: ("TIT1", "GRP1"),
        ItemKey.TRACK_TITLE: "TIT2",
        ItemKey.TRACK_SUBTITLE: "TIT3",
        ItemKey.ORIGINAL_ALBUM_TITLE: "TOAL",
        ItemKey.ORIGINAL_ARTIST: "TOPE",
        ItemKey.ORIGINAL_LYRICIST: "TOLY",
        ItemKey.ALBUM_TITLE_SORT_ORDER: "TSOA",
        ItemKey.ALBUM_ARTIST_SORT_ORDER: "TSO2",
        ItemKey.TRACK_TITLE_SORT_ORDER: "TSOT",
        ItemKey.TRACK_ARTIST_SORT_ORDER: "TSOP",
        ItemKey.COMPOSER_SORT_ORDER: "TSOC",
        ItemKey.ALBUM_ARTIST: "TPE2",
        ItemKey.TRACK_ARTIST: "TPE1",
        ItemKey.WRITER: "TEXT",
        ItemKey.COMPOSER: "TCOM",
        ItemKey.CONDUCTOR: "TPE3",
        ItemKey.INVOLVED_PEOPLE: "TIPL",
        ItemKey.MUSICIAN_CREDITS: "TMCL",
        ItemKey.PUBLISHER: "TPUB",
        ItemKey.INTERNET_RADIO_STATION_NAME: "TRSN",
        ItemKey.INTERNET_RADIO_STATION_OWNER: "TRSO",
        ItemKey.REMIXER: "TPE4",
        ItemKey.DISC_NUMBER: "TPOS",
        ItemKey.DISC_TOTAL: "TPOS",
        ItemKey.TRACK_NUMBER: "TRCK",
        ItemKey.TRACK_TOTAL: "TRCK",
        ItemKey.POPULARIMETER: "POPM",
        ItemKey.RECORDING_DATE: "TDRC",
        ItemKey.ORIGINAL_RELEASE_DATE: "TDOR",
        ItemKey.ISRC: "TSRC",
        ItemKey.MOVEMENT: "MVNM",
        ItemKey.MOVEMENT_INDEX: "MVIN",
        ItemKey.FLAG_COMPILATION: "TCMP",
        ItemKey.FLAG_PODCAST: "PCST",
        ItemKey.FILE_TYPE: "TFLT",
        ItemKey.FILE_OWNER: "TOWN",
        ItemKey.TAGGING_TIME: "TDTG",
        ItemKey.LENGTH: "TLEN",
        ItemKey.ORIGINAL_FILE_NAME: "TOFN",
        ItemKey.ORIGINAL_MEDIA_TYPE: "TMED",
        ItemKey.ENCODED_BY: "TENC",
        ItemKey.ENCODER_SOFTWARE: "TSSE",
        ItemKey.ENCODING_TIME: "TDEN",
        ItemKey.AUDIO_FILE_URL: "WOAF",
        ItemKey.AUDIO_SOURCE_URL: "WOAS",
        ItemKey.COMMERCIAL_INFORMATION_URL: "WCOM",
        ItemKey.COPYRIGHT_URL: "WCOP",
        ItemKey.TRACK_ARTIST_URL: "WOAR",
        ItemKey.RADIO_STATION_URL: "WORS",
        ItemKey.PAYMENT_URL: "WPAY",
        ItemKey.PUBLISHER_URL: "WPUB",
        ItemKey.GENRE: "TCON",
        ItemKey.INITIAL_KEY: "TKEY",
        ItemKey.MOOD: "TMOO",
        ItemKey.BPM: "TBPM",
        ItemKey.COPYRIGHT_MESSAGE: "TCOP",
        ItemKey.PODCAST_DESCRIPTION: "TDES",
        ItemKey.PODCAST_SERIES_CATEGORY: "TCAT",
        ItemKey.PODCAST_URL: "WFED",
        ItemKey.PODCAST_RELEASE_DATE: "TDRL",
        ItemKey.PODCAST_GLOBAL_UNIQUE_ID: "TGID",
        ItemKey.PODCAST_KEYWORDS: "TKWD",
        ItemKey.COMMENT: "COMM",
        ItemKey.LANGUAGE: "TLAN",
        ItemKey.LYRICS: "USLT",
    })

    # Year has no frame of its own, it is written as the recording date
    Tag.RegisterKey(TagType.ID3V2, ItemKey.YEAR, "TDRC")
