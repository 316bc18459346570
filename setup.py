from setuptools import find_packages, setup

setup(
    name="motion-photo-mux",
    version="0.1.0",
    description="把 Live Photo 的靜態影像與影片合併為 Motion Photo",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.10",
    install_requires=[
        "Pillow>=10.0",
        "pillow-heif>=0.13",
        "piexif>=1.1.3",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "motion-photo-mux=motion_photo_mux.main:main",
        ],
    },
)
