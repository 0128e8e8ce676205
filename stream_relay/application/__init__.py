"""
Application Layer

FastAPI process roots for the two services. Each owns its configuration,
builds its components and runs one background task for its lifetime.
"""
