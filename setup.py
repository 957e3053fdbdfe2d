from setuptools import setup, find_packages

setup(
    name="asl_learn",
    version="0.2.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "opencv-python>=4.8.0",
        "numpy>=1.21.0",
        "torch>=2.0.0",
        "mediapipe>=0.10.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    python_requires=">=3.8",
    author="Raul Adell",
    description="Guided ASL alphabet learning on top of live hand pose classification",
    long_description="Learning sessions that walk a signer through A-Z using camera frames, "
                     "MediaPipe hand landmarks and a PyTorch sign classifier",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
