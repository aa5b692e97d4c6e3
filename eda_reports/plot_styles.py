"""
Central styling for report charts.

Use style(role, series) for all plot/scatter calls. Colours and labels come
from one SERIES palette so the same model is drawn the same way in every
figure. No hardcoded color= in the plotting functions.
"""

# --- Base styles (kwargs for ax.plot / ax.scatter / ax.bar) ---
OBSERVED_STYLE = {
    "s": 18,
    "alpha": 0.7,
    "zorder": 3,
}

FIT_STYLE = {
    "linewidth": 2.0,
    "zorder": 4,
}

BAR_STYLE = {
    "alpha": 0.85,
    "zorder": 2,
}

SERIES_LINE_STYLE = {
    "linewidth": 1.0,
    "alpha": 0.9,
}

GUIDE_STYLE = {
    "linewidth": 0.6,
    "alpha": 0.5,
    "zorder": 1,
}

HEATMAP_CMAP = "magma_r"

# --- Single series palette ---
SERIES = {
    "observed": {"color": "C0", "label": "Observed"},
    "daily": {"color": "C1", "linestyle": "--", "label": "Daily Fourier fit (24h)"},
    "daily_weekly": {"color": "C3", "linestyle": "-", "label": "Daily + weekly Fourier fit"},
    "incidents": {"color": "C0", "label": "Incidents"},
    "states": {"color": "C0", "label": "States"},
    "rurality": {"color": "C3", "linestyle": "-", "label": "OLS: deaths ~ rurality"},
    "rurality_cases": {"color": "C2", "label": "OLS: deaths ~ cases + rurality"},
    "identity": {"color": "gray", "linestyle": ":", "label": "Observed = fitted"},
    "day_boundary": {"color": "gray", "label": "_nolegend_"},
    # Colour comes from the axes cycle; line style marks the rurality group.
    "rural_state": {"linestyle": "-"},
    "urban_state": {"linestyle": "--"},
}

ROLE_BASES = {
    "observed": OBSERVED_STYLE,
    "fit": FIT_STYLE,
    "bar": BAR_STYLE,
    "series": SERIES_LINE_STYLE,
    "guide": GUIDE_STYLE,
}


def style(role: str, series: str, *, label: str | None = None) -> dict:
    """
    Return a single style dict for ax.plot(...), ax.scatter(...) or ax.bar(...).

    - role: "observed" | "fit" | "bar" | "series" | "guide"
    - series: key into SERIES (e.g. "daily", "rurality")
    - label: optional legend override

    `linestyle` is dropped for the "observed" and "bar" roles.
    """
    base = ROLE_BASES.get(role)
    if base is None:
        raise ValueError(f"Unknown role: {role}")
    series_d = SERIES.get(series)
    if series_d is None:
        raise ValueError(f"Unknown series: {series!r}")
    out = {**base, **series_d}

    if role in ("observed", "bar"):
        out.pop("linestyle", None)

    if label is not None:
        out["label"] = label
    return out
