import os
from dotenv import load_dotenv

load_dotenv()

# Logging
LOG_LEVEL = os.getenv("COSET_LOG_LEVEL", "INFO").upper()

# Key generation (only "ecdsa" / P-256 is recognised)
KEY_TYPE = os.getenv("COSET_KEY_TYPE", "ecdsa")

# Default file names used by the CLI; the core never touches the filesystem
SIG_FILE = os.getenv("COSET_SIG_FILE", "sig.cbor")
PRIVATE_KEY_FILE = os.getenv("COSET_PRIVATE_KEY_FILE", "private.pem")
PUBLIC_KEY_FILE = os.getenv("COSET_PUBLIC_KEY_FILE", "public.pem")

OUTPUT_FORMAT = os.getenv("COSET_OUTPUT_FORMAT", "text")  # text|hex|base64
# Emit COSE_Sign1_Tagged (CBOR tag 18) envelopes
TAGGED = os.getenv("COSET_TAGGED", "true").lower() == "true"
