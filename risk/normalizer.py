"""
risk/normalizer.py

Deterministic signal normalization utilities for churn risk inputs.
"""


class RiskNormalizer:
    """Provides stateless normalization methods for churn risk signals.

    All methods are deterministic. No external dependencies, state,
    or side effects.
    """

    def inverse_ratio(self, value: float, scale: float) -> float:
        """Return ``1 - value / scale`` without clamping.

        Used for signals where a higher raw value means lower risk.

        Args:
            value: The raw input value.
            scale: The value at which risk reaches zero.

        Returns:
            A float that is in [0, 1] only when ``value`` is in [0, scale].

        Raises:
            ValueError: If scale is zero.
        """
        if scale == 0:
            raise ValueError("scale must not be zero.")
        return 1.0 - (value / scale)

    def saturating_ratio(self, value: float, saturation: float) -> float:
        """Return ``min(value / saturation, 1)``.

        The ratio ramps linearly and caps at 1 once ``value`` reaches
        ``saturation``. There is no lower bound.

        Raises:
            ValueError: If saturation is zero.
        """
        if saturation == 0:
            raise ValueError("saturation must not be zero.")
        return min(value / saturation, 1.0)

    def decaying_ratio(self, value: float, horizon: float) -> float:
        """Return ``max(1 - value / horizon, 0)``.

        Full contribution at zero, none once ``value`` reaches ``horizon``.

        Raises:
            ValueError: If horizon is zero.
        """
        if horizon == 0:
            raise ValueError("horizon must not be zero.")
        return max(1.0 - (value / horizon), 0.0)

    def clamp(self, value: float, min_value: float, max_value: float) -> float:
        """Clamp a value to the specified [min_value, max_value] range.

        Args:
            value: The float to clamp.
            min_value: The lower bound of the output range.
            max_value: The upper bound of the output range.

        Returns:
            value if within bounds, otherwise min_value or max_value.
        """
        return max(min_value, min(value, max_value))
