from .declarative import Declarative, declarative_with_defaults  # noqa
