"""Build tasks.

Each module declares tasks with `@task(name=..., inputs=[...], outputs=[...])`;
the CLI discovers them by importing every module in this package. Pipelines
wiring tasks together live in `sitepipe.orchestrator.pipelines`.
"""
