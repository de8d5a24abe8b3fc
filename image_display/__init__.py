"""Display an image zoomed on the region of interest that best fits its container."""
