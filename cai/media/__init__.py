"""Generated media persistence package.

Scope:
    Names and writes images and audio returned by image-generation and
    text-to-speech endpoints.

Non-goals:
    - No downloading of hosted image URLs.
    - No format conversion or metadata embedding.
"""
