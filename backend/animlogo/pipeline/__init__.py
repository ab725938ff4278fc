"""Generation stages: logo image (logo.py) and logo animation (animation.py)."""
