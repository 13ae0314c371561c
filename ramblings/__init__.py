"""Personal blog backend: posts, comments, images and admin session."""
