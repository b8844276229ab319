"""
rPPG Analyzer — heart-rate estimation from averaged skin-region RGB samples.
A batch of red/green/blue readings captured by a camera is fused with the
POS chrominance projection, band-passed and searched spectrally for the
cardiac peak; the result carries BPM, a confidence tier and a display
waveform.
"""

from rppg_analyzer.analyzer import PulseAnalyzer, analyze
from rppg_analyzer.models import AnalysisResult, Confidence, RGBSample

__version__ = "0.1.0"
__author__ = "rppg_analyzer"

__all__ = ["AnalysisResult", "Confidence", "PulseAnalyzer", "RGBSample", "analyze"]
