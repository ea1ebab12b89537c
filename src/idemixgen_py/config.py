import os

PROGRAM_NAME = "idemixgen"
VERSION = "0.1.0"

# Environment Variable Overriding The Base Directory
BASE_DIR_ENV_VAR = "IDEMIXGEN_BASE_DIR"
DEFAULT_BASE_DIR = "."

###
# Directory Layout (Relative To The Base Directory)
###

ISSUER_DIR = "ca"
MSP_DIR = "msp"
SIGNER_DIR = os.path.join(MSP_DIR, "signer")

ISSUER_SECRET_KEY_FILE = "IssuerSecretKey"
ISSUER_PUBLIC_KEY_FILE = "IssuerPublicKey"
SIGNER_CONFIG_FILE = "SignerConfig"

# Owner-only access
DIRECTORY_MODE = 0o700
FILE_MODE = 0o600

###
# Issuer Attributes
###

ATTRIBUTE_NAME_OU = "OU"
ATTRIBUTE_NAME_ROLE = "Role"
ATTRIBUTE_NAMES = [ATTRIBUTE_NAME_OU, ATTRIBUTE_NAME_ROLE]

ATTRIBUTE_INDEX_OU = 0
ATTRIBUTE_INDEX_ROLE = 1

ROLE_MEMBER = 0
ROLE_ADMIN = 1
