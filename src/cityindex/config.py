# Paths
INPUT_PATH: str = "elections.json"
OUTPUT_DIR: str = "public/cities"

# Input shape: "elections" (merged results) or "communes" (commune list)
SCHEMA: str = "elections"

# N-gram bounds (prefix lengths)
MIN_NGRAM: int = 2
MAX_NGRAM: int = 45

# /* ~~~ add each hyphen-separated word as a token next to the joined name ~~~ */
SPLIT_WORDS: bool = True

# Ranked hits kept per index key
MAX_RESULTS_PER_KEY: int = 20

# Partitioning: one file per leading letter, everything else in "0"
FALLBACK_BUCKET: str = "0"
BUCKETS: tuple[str, ...] = tuple("abcdefghijklmnopqrstuvwxyz") + (FALLBACK_BUCKET,)

# Emission layout: "partition" (search-<bucket>.json) or "per_key" (search/<key>.json)
EMIT_MODE: str = "partition"

# Also write <id>.json and <slug>.json per record
EMIT_RECORD_FILES: bool = False

# Artifact names
CITIES_DATA_FILE: str = "cities-data.json"
SLUG_MAP_FILE: str = "slug-map.json"
PARTITION_FILE: str = "search-{bucket}.json"
PER_KEY_DIR: str = "search"

# /* ~~~ consumer side ~~~ */
MIN_QUERY_LENGTH: int = 2
DISPLAY_LIMIT: int = 50
HTTP_TIMEOUT: float = 10.0

# Static serving
JSON_CACHE_MAX_AGE: int = 3600
