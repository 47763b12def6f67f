from setuptools import setup, find_packages


setup(
    name="padbreak",
    version="0.0.1",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "cryptography>=2.7",
    ],
    extras_require={
        "debug": ["pytest>=5.3.2"]
    },
    entry_points={
        "console_scripts": [
            "padbreak-scheme=padbreak.cli:scheme_main",
            "padbreak-attack=padbreak.cli:attack_main",
            "padbreak-oracle=padbreak.cli:oracle_main",
            "padbreak-hex=padbreak.cli:hex_main",
        ]
    }
)
