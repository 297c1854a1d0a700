"""Template sources — where the assets to install come from.

- Bundled: templates shipped inside the package
- Remote: a ``.github`` directory in a GitHub repository
"""
