"""
Defaults shared across shardplan.

Values here are only defaults; partition and planner configuration blocks may
override some of them per job.
"""

# Rows per Arrow record batch when streaming Parquet part files
DEFAULT_BATCH_SIZE = 10_000

# Part file naming used by the reader and writer
PART_FILE_PATTERN = "part_{index:04}.parquet"
PART_FILE_GLOB = "*.parquet"

# =============================================================================
# RANGE PARTITIONING SAMPLE SIZES
# =============================================================================
# Target sample rows per *output* partition. The total sample is capped at
# MAX_SAMPLE_SIZE and spread over the input partitions with an oversampling
# factor so that skewed inputs still contribute enough candidates.
DEFAULT_SAMPLE_SIZE_PER_PARTITION = 20
MAX_SAMPLE_SIZE = 1_000_000
SAMPLE_OVERSAMPLING_FACTOR = 3.0

# Base seed for range sampling; each input partition derives its own seed
DEFAULT_RANGE_SEED = 0x5EED

# Digest size (bytes) of the stable row hash
ROW_HASH_DIGEST_SIZE = 8
