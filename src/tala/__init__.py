"""tala: spaced-repetition study sessions for bilingual lessons."""

VERSION = "0.1.0"
