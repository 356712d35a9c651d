"""
This package contains the conversion pipelines of Smart Downsize.

A pipeline is an entry point that prepares the output location, translates the
options and coordinates the services (Pillow engine, gifsicle, ffmpeg) for one
kind of job: image, video or still frame.
"""
