"""Hand pose detection and sign classification."""
