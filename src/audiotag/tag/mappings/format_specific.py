"""Key mappings for APE, MP4 ilst, RIFF INFO, Vorbis comments and AIFF text."""

from ..core import Tag
from ..keys import ItemKey, TagType


def _itunes(name):
    return "----:com.apple.iTunes:" + name


def setup_format_specific_mappings():
    """Register the key tables of the non-ID3 formats."""

    # APEv2 (case-insensitive, "Track" and "Disc" hold "number/total")
    # -----------------------------------------------------------------
    Tag.RegisterKeys(TagType.APE, {
        ItemKey.ALBUM_TITLE: "Album",
        ItemKey.SET_SUBTITLE: "DiscSubtitle",
        ItemKey.CONTENT_GROUP: "Grouping",
        ItemKey.TRACK_TITLE: "Title",
        ItemKey.TRACK_SUBTITLE: "Subtitle",
        ItemKey.ALBUM_TITLE_SORT_ORDER: "ALBUMSORT",
        ItemKey.ALBUM_ARTIST_SORT_ORDER: "ALBUMARTISTSORT",
        ItemKey.TRACK_TITLE_SORT_ORDER: "TITLESORT",
        ItemKey.TRACK_ARTIST_SORT_ORDER: "ARTISTSORT",
        ItemKey.ALBUM_ARTIST: ("Album Artist", "ALBUMARTIST"),
        ItemKey.TRACK_ARTIST: "Artist",
        ItemKey.ARRANGER: "Arranger",
        ItemKey.WRITER: "Writer",
        ItemKey.COMPOSER: "Composer",
        ItemKey.CONDUCTOR: "Conductor",
        ItemKey.ENGINEER: "Engineer",
        ItemKey.LYRICIST: "Lyricist",
        ItemKey.MIX_DJ: "DjMixer",
        ItemKey.MIX_ENGINEER: "Mixer",
        ItemKey.PERFORMER: "Performer",
        ItemKey.PRODUCER: "Producer",
        ItemKey.LABEL: "Label",
        ItemKey.REMIXER: "MixArtist",
        ItemKey.DISC_NUMBER: "Disc",
        ItemKey.DISC_TOTAL: "Disc",
        ItemKey.TRACK_NUMBER: "Track",
        ItemKey.TRACK_TOTAL: "Track",
        ItemKey.YEAR: "Year",
        ItemKey.ISRC: "ISRC",
        ItemKey.BARCODE: "Barcode",
        ItemKey.CATALOG_NUMBER: "CatalogNumber",
        ItemKey.FLAG_COMPILATION: "Compilation",
        ItemKey.ORIGINAL_MEDIA_TYPE: "Media",
        ItemKey.ENCODED_BY: "EncodedBy",
        ItemKey.GENRE: "Genre",
        ItemKey.MOOD: "Mood",
        ItemKey.COPYRIGHT_MESSAGE: "Copyright",
        ItemKey.COMMENT: "Comment",
        ItemKey.LANGUAGE: "language",
        ItemKey.SCRIPT: "Script",
        ItemKey.LYRICS: "Lyrics",
    })

    # MP4 ilst ("trkn" and "disk" hold a binary number/total pair)
    # -------------------------------------------------------------
    Tag.RegisterKeys(TagType.MP4_ILST, {
        ItemKey.ALBUM_TITLE: "\xa9alb",
        ItemKey.SET_SUBTITLE: _itunes("DISCSUBTITLE"),
        ItemKey.SHOW_NAME: "tvsh",
        ItemKey.CONTENT_GROUP: "\xa9grp",
        ItemKey.TRACK_TITLE: "\xa9nam",
        ItemKey.TRACK_SUBTITLE: _itunes("SUBTITLE"),
        ItemKey.ALBUM_TITLE_SORT_ORDER: "soal",
        ItemKey.ALBUM_ARTIST_SORT_ORDER: "soaa",
        ItemKey.TRACK_TITLE_SORT_ORDER: "sonm",
        ItemKey.TRACK_ARTIST_SORT_ORDER: "soar",
        ItemKey.SHOW_NAME_SORT_ORDER: "sosn",
        ItemKey.COMPOSER_SORT_ORDER: "soco",
        ItemKey.ALBUM_ARTIST: "aART",
        ItemKey.TRACK_ARTIST: "\xa9ART",
        ItemKey.COMPOSER: "\xa9wrt",
        ItemKey.CONDUCTOR: _itunes("CONDUCTOR"),
        ItemKey.ENGINEER: _itunes("ENGINEER"),
        ItemKey.LYRICIST: _itunes("LYRICIST"),
        ItemKey.MIX_DJ: _itunes("DJMIXER"),
        ItemKey.MIX_ENGINEER: _itunes("MIXER"),
        ItemKey.PRODUCER: _itunes("PRODUCER"),
        ItemKey.LABEL: _itunes("LABEL"),
        ItemKey.REMIXER: _itunes("REMIXER"),
        ItemKey.DISC_NUMBER: "disk",
        ItemKey.DISC_TOTAL: "disk",
        ItemKey.TRACK_NUMBER: "trkn",
        ItemKey.TRACK_TOTAL: "trkn",
        ItemKey.LAW_RATING: "rate",
        ItemKey.RECORDING_DATE: "\xa9day",
        ItemKey.ISRC: _itunes("ISRC"),
        ItemKey.BARCODE: _itunes("BARCODE"),
        ItemKey.CATALOG_NUMBER: _itunes("CATALOGNUMBER"),
        ItemKey.FLAG_COMPILATION: "cpil",
        ItemKey.FLAG_PODCAST: "pcst",
        ItemKey.ORIGINAL_MEDIA_TYPE: _itunes("MEDIA"),
        ItemKey.ENCODER_SOFTWARE: "\xa9too",
        ItemKey.GENRE: ("\xa9gen", "gnre"),
        ItemKey.MOOD: _itunes("MOOD"),
        ItemKey.BPM: "tmpo",
        ItemKey.COPYRIGHT_MESSAGE: "cprt",
        ItemKey.LICENSE: _itunes("LICENSE"),
        ItemKey.PODCAST_DESCRIPTION: "ldes",
        ItemKey.PODCAST_SERIES_CATEGORY: "catg",
        ItemKey.PODCAST_URL: "purl",
        ItemKey.PODCAST_GLOBAL_UNIQUE_ID: "egid",
        ItemKey.PODCAST_KEYWORDS: "keyw",
        ItemKey.COMMENT: "\xa9cmt",
        ItemKey.DESCRIPTION: "desc",
        ItemKey.LANGUAGE: _itunes("LANGUAGE"),
        ItemKey.SCRIPT: _itunes("SCRIPT"),
        ItemKey.LYRICS: "\xa9lyr",
    })
    Tag.RegisterKey(TagType.MP4_ILST, ItemKey.YEAR, "\xa9day")

    # RIFF INFO
    # ---------
    Tag.RegisterKeys(TagType.RIFF_INFO, {
        ItemKey.ALBUM_TITLE: "IPRD",
        ItemKey.TRACK_TITLE: "INAM",
        ItemKey.TRACK_ARTIST: "IART",
        ItemKey.WRITER: "IWRI",
        ItemKey.COMPOSER: "IMUS",
        ItemKey.PRODUCER: "IPRO",
        ItemKey.TRACK_NUMBER: ("IPRT", "ITRK"),
        ItemKey.TRACK_TOTAL: "IFRM",
        ItemKey.LAW_RATING: "IRTD",
        ItemKey.RECORDING_DATE: "ICRD",
        ItemKey.ORIGINAL_MEDIA_TYPE: "ISRF",
        ItemKey.ENCODED_BY: "ITCH",
        ItemKey.ENCODER_SOFTWARE: "ISFT",
        ItemKey.GENRE: "IGNR",
        ItemKey.COPYRIGHT_MESSAGE: "ICOP",
        ItemKey.COMMENT: "ICMT",
        ItemKey.LANGUAGE: "ILNG",
    })
    Tag.RegisterKey(TagType.RIFF_INFO, ItemKey.YEAR, "ICRD")

    # Vorbis comments
    # ---------------
    Tag.RegisterKeys(TagType.VORBIS_COMMENTS, {
        ItemKey.ALBUM_TITLE: "ALBUM",
        ItemKey.SET_SUBTITLE: "DISCSUBTITLE",
        ItemKey.CONTENT_GROUP: "GROUPING",
        ItemKey.TRACK_TITLE: "TITLE",
        ItemKey.TRACK_SUBTITLE: "SUBTITLE",
        ItemKey.ALBUM_TITLE_SORT_ORDER: "ALBUMSORT",
        ItemKey.ALBUM_ARTIST_SORT_ORDER: "ALBUMARTISTSORT",
        ItemKey.TRACK_TITLE_SORT_ORDER: "TITLESORT",
        ItemKey.TRACK_ARTIST_SORT_ORDER: "ARTISTSORT",
        ItemKey.ALBUM_ARTIST: "ALBUMARTIST",
        ItemKey.TRACK_ARTIST: "ARTIST",
        ItemKey.ARRANGER: "ARRANGER",
        ItemKey.WRITER: ("AUTHOR", "WRITER"),
        ItemKey.COMPOSER: "COMPOSER",
        ItemKey.CONDUCTOR: "CONDUCTOR",
        ItemKey.ENGINEER: "ENGINEER",
        ItemKey.LYRICIST: "LYRICIST",
        ItemKey.MIX_DJ: "DJMIXER",
        ItemKey.MIX_ENGINEER: "MIXER",
        ItemKey.PERFORMER: "PERFORMER",
        ItemKey.PRODUCER: "PRODUCER",
        ItemKey.PUBLISHER: "PUBLISHER",
        ItemKey.LABEL: "LABEL",
        ItemKey.REMIXER: "REMIXER",
        ItemKey.DISC_NUMBER: "DISCNUMBER",
        ItemKey.DISC_TOTAL: ("DISCTOTAL", "TOTALDISCS"),
        ItemKey.TRACK_NUMBER: "TRACKNUMBER",
        ItemKey.TRACK_TOTAL: ("TRACKTOTAL", "TOTALTRACKS"),
        ItemKey.RECORDING_DATE: "DATE",
        ItemKey.YEAR: "YEAR",
        ItemKey.ORIGINAL_RELEASE_DATE: "ORIGINALDATE",
        ItemKey.ISRC: "ISRC",
        ItemKey.CATALOG_NUMBER: "CATALOGNUMBER",
        ItemKey.FLAG_COMPILATION: "COMPILATION",
        ItemKey.ORIGINAL_MEDIA_TYPE: "MEDIA",
        ItemKey.ENCODED_BY: "ENCODED-BY",
        ItemKey.ENCODER_SOFTWARE: "ENCODER",
        ItemKey.ENCODER_SETTINGS: ("ENCODING", "ENCODERSETTINGS"),
        ItemKey.GENRE: "GENRE",
        ItemKey.MOOD: "MOOD",
        ItemKey.BPM: "BPM",
        ItemKey.COPYRIGHT_MESSAGE: "COPYRIGHT",
        ItemKey.LICENSE: "LICENSE",
        ItemKey.COMMENT: "COMMENT",
        ItemKey.LANGUAGE: "LANGUAGE",
        ItemKey.SCRIPT: "SCRIPT",
        ItemKey.LYRICS: "LYRICS",
    })

    # AIFF text chunks
    # ----------------
    Tag.RegisterKeys(TagType.AIFF_TEXT, {
        ItemKey.TRACK_TITLE: "NAME",
        ItemKey.TRACK_ARTIST: "AUTH",
        ItemKey.COPYRIGHT_MESSAGE: "(c) ",
        ItemKey.COMMENT: "ANNO",
    })
