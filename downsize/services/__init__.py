"""
Services Package for Smart Downsize.

A service wraps one engine or one piece of translation logic:

- **Argument translation (`argument_translator`):** pure functions turning
  `ConversionOptions` into ffmpeg/gifsicle argument lists or a Pillow
  `ImagePlan`.
- **Image engine (`image_engine`, `post_processing`):** runs an `ImagePlan`
  with Pillow, including the free-form post-processing directives.
- **Animated GIFs (`gif_converter`):** resizes animated GIFs with gifsicle.
- **Video (`video_converter`, `progress`):** the `VideoJob` handle running
  ffmpeg in the background and reporting progress.
- **Still frames (`still_extractor`):** the two-attempt frame extraction.
"""
