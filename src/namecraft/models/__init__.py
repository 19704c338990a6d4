"""Request, response and domain data models."""
