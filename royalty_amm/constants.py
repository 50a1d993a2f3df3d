"""Protocol constants for the royalty AMM."""

# Basis point denominator (10000 = 100%)
BPS_DENOMINATOR = 10_000

# Default swap fee (300 bps = 3%)
DEFAULT_SWAP_FEE_BPS = 300

# Null recipient / native currency marker
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
NATIVE_CURRENCY = ZERO_ADDRESS

# Address the engine holds custody under when none is configured
DEFAULT_ENGINE_ADDRESS = "0x00000000000000000000000000000000000a3a3a"
