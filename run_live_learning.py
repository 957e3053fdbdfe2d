#!/usr/bin/env python3
"""
Live ASL Learning - Main Runner Script

Quick launcher for the guided alphabet lesson.

Requirements:
- Trained landmark classifier checkpoint (see asl_learn.vision.model)
- Camera connected and accessible
- All dependencies installed (opencv-python, torch, mediapipe)

Usage:
    python run_live_learning.py --model models/asl_landmarks.pth

Controls in live mode:
- L: Start lesson at A
- X: Stop lesson
- T: Toggle spelling mode
- C: Clear spelled text
- Q: Quit
"""

import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

# Import and run
from asl_learn.live_learning import main

if __name__ == "__main__":
    print("🚀 Launching Live ASL Learning...")
    print("📋 Controls: L=Learn | X=Stop | T=Spelling | C=Clear | Q=Quit")
    print("=" * 50)
    sys.exit(main())
