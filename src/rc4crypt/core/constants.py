"""Project-wide constants for rc4crypt."""

CHUNK_SIZE = 1024  # read/write buffer size

MIN_KEY_LEN = 1
MAX_KEY_LEN = 256

DEFAULT_KEY_SOURCE = "key.rc4"
KEY_LITERAL_PREFIX = "@"
STDIO_PATH = "-"

CIPHER = "rc4"
ENCODING = "utf-8"

# Process exit statuses per failure category
EXIT_KEY_SOURCE = 2
EXIT_OUTPUT_OPEN = 3
EXIT_INPUT_OPEN = 4
EXIT_CIPHER_SETUP = 5
EXIT_READ = 6
EXIT_WRITE = 7

# (key hex, plaintext hex, ciphertext hex)
GOLDEN_VECTORS = (
    ("01", "0000000000", "06080e0e18"),
    ("0102030405", "00" * 16, "b2396305f03dc027ccc3524a0a1118a8"),  # RFC 6229
    ("4b6579", b"Plaintext".hex(), "bbf316e8d940af0ad3"),
    ("57696b69", b"pedia".hex(), "1021bf0420"),
    ("536563726574", b"Attack at dawn".hex(), "45a01f645fc35b383552544b9bf5"),
)
