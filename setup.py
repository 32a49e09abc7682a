import setuptools

with open("README.rst", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="optiscene",
    version="0.1.0",
    author="The optiscene developers",
    description="Optical scene graphs with energy, ray tracing and ghost "
                "focus analysis",
    long_description=long_description,
    long_description_content_type="text/x-rst",
    license="BSD-3-Clause",
    package_dir={"": "src"},
    packages=setuptools.find_packages("src"),
    python_requires=">=3.8",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
        "Topic :: Scientific/Engineering :: Physics",
    ],
    keywords=['geometric optics', 'ray tracing', 'optical scene graph',
              'laser systems', 'ghost focus', 'fluence', 'lidt',
              'energy flow', 'beam splitter'],
    install_requires=[
        "opticalglass",
        "numpy>=1.17.0",
        "scipy>=1.7.0",
        "pandas>=0.23.4",
        "attrs>=18.1.0",
        "transforms3d>=0.3.1",
        "networkx>=2.5",
        "anytree>=2.8.0",
        "shapely>=1.8"
        ],
    extras_require={
        'test': ["pytest"],
    },
)
