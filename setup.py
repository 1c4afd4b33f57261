from setuptools import setup, find_packages

setup(
    name="codemod-learn",
    version="0.1.0",
    packages=find_packages(include=["codemod_learn", "codemod_learn.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests",
        "pyyaml",
        # Top-level statement extraction
        "tree-sitter>=0.22",
        "tree-sitter-python",
        "tree-sitter-javascript",
        "tree-sitter-typescript",
        "tree-sitter-java",
        "tree-sitter-c",
        "tree-sitter-cpp",
        "tree-sitter-go",
        "tree-sitter-rust",
        "tree-sitter-ruby",
        "tree-sitter-php",
        "tree-sitter-c-sharp",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "codemod-learn=codemod_learn.cli:main",
        ],
    },
    description="Extract minimal before/after snippets from a git change "
                "to learn a codemod from.",
)
