"""Operations console core for guard and workforce management records."""

__version__ = "0.4.0"
