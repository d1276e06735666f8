"""
On-disk repository state.

This package is responsible for:
* Creating the repository directories and the default manifest.
* Reading ``manifest.json`` fresh for every catalog request.
* Resolving artifact requests to paths below the artifact root.
"""
