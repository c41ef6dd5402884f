"""
Services for the stitch-up pipeline.

Subpackages:
    providers: HTTP/SDK clients for the generation providers
    stages: Stage abstraction, batch runner and the seven pipeline stages
    pipeline: Provider selection and the pipeline orchestrator
"""
