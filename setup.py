# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="skillpack",
    version="0.1.0",
    description="Empaqueta un documento de skill junto con todos los ficheros locales que referencia",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["skillpack", "skillpack.*"]),
    python_requires=">=3.9",
    install_requires=[
        "markdown-it-py>=3.0",  # Tokenizado CommonMark de enlaces y bloques de código
        "PyYAML>=6.0",          # Cabecera del documento raíz
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        'console_scripts': [
            'skillpack=skillpack.interface.cli.app:main',  # Permite ejecutar el empaquetador vía CLI
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
