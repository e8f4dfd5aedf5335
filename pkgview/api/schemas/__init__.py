# Pydantic response models for the view API.
