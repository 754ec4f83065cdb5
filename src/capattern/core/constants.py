"""Domain constants baked into the filtering algorithm.

These are kept as named module-level values rather than parameters of the
public entry points. The lower-level functions accept overrides.
"""

# Absolute amplitude below which correlation scores are discarded. Assumes the
# trace baseline sits near zero (e.g. after dF/F) and that physiologically
# meaningful activity rises above this level. Not a tuned parameter.
NOISE_FLOOR = 0.1

# Mask value for samples outside every keep window under the peak-aware
# policy. Keeps the output strictly nonzero wherever the input is, so
# downstream ratios and logs stay finite.
BASELINE_RETENTION = 0.001

# Number of leading detector peaks discarded on the reference signal. The
# detector's first report is treated as an edge artifact of its filters.
DROP_FIRST_REFERENCE_PEAK = 1

# Sentinel assigned to correlation windows with undefined Pearson coefficient.
# Compares below any threshold in [-1, 1] and is zeroed by thresholding.
DEGENERATE_CORR = float("-inf")

# Windows scored per block in the sliding correlation. Bounds the working
# memory to about this many template lengths regardless of signal length.
CORR_CHUNK_SIZE = 8192
