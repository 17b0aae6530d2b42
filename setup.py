from setuptools import setup, find_namespace_packages

# Paquete en src/ sin __init__.py de nivel superior
setup(
    name="iga-shell",
    version="0.1.0",
    description="Nonlinear isogeometric Kirchhoff-Love shell element kernel",
    package_dir={"": "src"},
    packages=find_namespace_packages("src", include=["iga_shell*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "scipy",
        "pyyaml",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
