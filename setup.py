import setuptools
import os

# READMEファイルがあれば読み込む
long_description = ""
if os.path.exists("README.md"):
    with open("README.md", "r", encoding="utf-8") as fh:
        long_description = fh.read()

# パッケージ設定
setuptools.setup(
    name="basezip",
    version="0.1.0",
    author="basezip Team",
    description="Pick entries out of zip archives by base filename and rezip a selected subset",
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    package_dir={"": "."},
    packages=setuptools.find_packages(where=".", include=["basezip", "basezip.*", "logutils", "logutils.*"]),
    python_requires=">=3.11",
    install_requires=[],
    extras_require={
        "tests": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "basezip=basezip.cli:main",
        ],
    },
    include_package_data=True,
)
