"""Classical PCA of discretized waveforms."""

# Authors: Ching-Chuan Chen
# SPDX-License-Identifier: MIT

from gaitfpca.pca.waveform_pca import WaveformPCA

__all__ = [
    "WaveformPCA",
]
