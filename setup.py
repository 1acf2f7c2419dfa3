import setuptools

setuptools.setup(
    name="sdprompt",
    version="0.1.0",
    description="Attribute-driven Stable Diffusion prompt assembly (positive/negative prompts with attention weights)",
    packages=["sdprompt"],
    install_requires=[
        "PyYAML>=6.0",
        "typer>=0.9.0"
    ],
    extras_require={
        "test": ["pytest>=7.0"]
    },
    entry_points={
        "console_scripts": [
            "sdprompt = sdprompt.cli:app"
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent"
    ]
)
