MOD_INFO_FILENAME = "mod.info"
CATALOG_FILENAME = "honus_miqol_db.lua"
CATALOG_ROOT_KEY = "mods"

UNKNOWN_MOD_NAME = "Unknown Mod"

PROJECT_ZOMBOID_APP_ID = "108600"
CREATOR_URL_FIELD = "creator_url"
CREATOR_URL_QUERY = f"appid={PROJECT_ZOMBOID_APP_ID}"

# Enrichment keys that may carry the published file id, highest priority first
WORKSHOP_ID_KEYS = ("fileid", "publishedfileid")
WORKSHOP_CREATOR_NAME_KEY = "creator_name"

# Identity, moderation and bandwidth heavy fields never written to the catalog
WORKSHOP_METADATA_DENYLIST = frozenset(
    {
        "description",
        "file_description",
        "short_description",
        "app_name",
        "appid",
        "author",
        "maybe_inappropriate_violence",
        "num_children",
        "num_comments_public",
        "num_reports",
        "preview_file_size",
        "preview_url",
        "publishedfileid",
        "raw_tags",
        "result",
        "revision",
        "revision_change_number",
        "show_subscribe_all",
        "tags",
        "ban_reason",
        "ban_text_check_result",
        "banned",
        "banner",
        "can_be_deleted",
        "can_subscribe",
        "consumer_appid",
        "consumer_shortcutid",
        "creator",
        "creator_appid",
        "creator_avatar",
        "creator_avatar_hash",
        "creator_avatar_medium",
        "creator_avatar_small",
        "creator_commentpermission",
        "creator_communityvisibilitystate",
        "creator_id",
        "creator_loccountrycode",
        "creator_locstatecode",
        "creator_personastate",
        "creator_personastateflags",
        "creator_primaryclanid",
        "creator_profileurl",
        "creator_profilestate",
        "creator_name",
        "creator_realname",
        "creator_steamid",
        "creator_timecreated",
        "title",
        "visibility",
        "workshop_accepted",
        "workshop_file",
        "map_followers",
        "followers",
        "lifetime_favorited",
        "lifetime_followers",
        "lifetime_playtime",
        "lifetime_playtime_sessions",
        "lifetime_subscriptions",
        "hcontent_file",
        "hcontent_preview",
        "language",
        "file_type",
        "file_url",
        "fileid",
        "filename",
        "flags",
    }
)

# Reference list fields in catalog emission order
LIST_FIELDS = (
    "requires",
    "dependencies",
    "load_after",
    "load_before",
    "incompatible",
    "packs",
    "tiledefs",
    "soundbanks",
)

# Lua 5.1 reserved words, never valid as bare table keys
LUA_KEYWORDS = frozenset(
    {
        "and",
        "break",
        "do",
        "else",
        "elseif",
        "end",
        "false",
        "for",
        "function",
        "goto",
        "if",
        "in",
        "local",
        "nil",
        "not",
        "or",
        "repeat",
        "return",
        "then",
        "true",
        "until",
        "while",
    }
)
