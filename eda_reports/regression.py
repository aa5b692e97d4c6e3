"""
Ordinary least squares helpers for the reports.

Implements:
- `fit_ols`: one response on a small fixed set of regressors (plus an
  intercept) via statsmodels, wrapped in an `OlsFit` container exposing
  fitted values and coefficient significance.
- `compare_nested`: F-test of a restricted model against a larger one that
  contains all of its regressors.
- `predict_curve`: fitted values on new rows, for drawing model lines.

A rank-deficient design matrix is surfaced as `numpy.linalg.LinAlgError`
instead of letting the pseudo-inverse quietly pick one solution.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

import numpy as np
import pandas as pd
import statsmodels.api as sm

from .config import SIGNIFICANCE_LEVEL


@dataclass
class OlsFit:
    """Result of one OLS fit."""

    name: str
    response: str
    regressors: List[str]
    params: pd.Series
    bse: pd.Series
    pvalues: pd.Series
    rsquared: float
    rsquared_adj: float
    aic: float
    nobs: int
    fitted: pd.Series
    summary_text: str
    results: object = field(repr=False)

    def significant(self, alpha: float = SIGNIFICANCE_LEVEL) -> List[str]:
        """Regressors (excluding the intercept) with p-value below `alpha`."""
        pv = self.pvalues.drop("const", errors="ignore")
        return pv[pv < alpha].index.tolist()

    def coefficient_table(self) -> pd.DataFrame:
        """Params, standard errors and p-values side by side."""
        return pd.DataFrame({"coef": self.params, "std_err": self.bse, "p_value": self.pvalues})


@dataclass
class NestedComparison:
    """F-test of H0: the extra regressors in `full` add nothing."""

    restricted: str
    full: str
    f_statistic: float
    pvalue: float
    df_diff: float


def _design(data: pd.DataFrame, regressors: Sequence[str]) -> pd.DataFrame:
    X = data[list(regressors)].astype(float)
    return sm.add_constant(X, has_constant="add")


def fit_ols(
    data: pd.DataFrame,
    response: str,
    regressors: Sequence[str],
    name: str | None = None,
) -> OlsFit:
    """
    Fit `response ~ const + regressors` by OLS.

    Parameters
    ----------
    data : DataFrame
        Must contain `response` and every regressor column.
    response : str
        Response column.
    regressors : sequence of str
        Regressor columns (intercept is added automatically).
    name : str, optional
        Label for tables and plots; defaults to the formula.

    Returns
    -------
    OlsFit

    Raises
    ------
    ValueError
        If columns are missing or no complete rows remain.
    numpy.linalg.LinAlgError
        If the design matrix is rank deficient.
    """
    regressors = list(regressors)
    if not regressors:
        raise ValueError("At least one regressor is required")
    missing = [c for c in [response] + regressors if c not in data.columns]
    if missing:
        raise ValueError(f"Columns not found in data: {missing}")

    used = data[[response] + regressors].dropna()
    n_dropped = len(data) - len(used)
    if n_dropped:
        print(f"  Warning: dropped {n_dropped} rows with missing values before fitting {name or response}")
    if used.empty:
        raise ValueError("No complete rows to fit")

    X = _design(used, regressors)
    y = used[response].astype(float)

    rank = np.linalg.matrix_rank(X.to_numpy())
    if rank < X.shape[1]:
        raise np.linalg.LinAlgError(
            f"Design matrix is rank deficient (rank {rank} < {X.shape[1]} columns: {list(X.columns)})"
        )

    results = sm.OLS(y, X).fit()
    formula = f"{response} ~ " + " + ".join(regressors)
    return OlsFit(
        name=name or formula,
        response=response,
        regressors=regressors,
        params=results.params,
        bse=results.bse,
        pvalues=results.pvalues,
        rsquared=float(results.rsquared),
        rsquared_adj=float(results.rsquared_adj),
        aic=float(results.aic),
        nobs=int(results.nobs),
        fitted=results.fittedvalues.rename(f"{response}_fitted"),
        summary_text=results.summary(title=name or formula).as_text(),
        results=results,
    )


def compare_nested(restricted: OlsFit, full: OlsFit) -> NestedComparison:
    """
    F-test comparing a restricted model to a full model on the same rows.

    The restricted regressors must be a subset of the full regressors.
    """
    extra = set(restricted.regressors) - set(full.regressors)
    if extra:
        raise ValueError(f"Restricted model has regressors not in full model: {sorted(extra)}")
    if restricted.nobs != full.nobs:
        raise ValueError("Nested models must be fitted on the same observations")

    f_stat, pvalue, df_diff = full.results.compare_f_test(restricted.results)
    return NestedComparison(
        restricted=restricted.name,
        full=full.name,
        f_statistic=float(f_stat),
        pvalue=float(pvalue),
        df_diff=float(df_diff),
    )


def predict_curve(fit: OlsFit, data: pd.DataFrame) -> pd.Series:
    """Fitted values of `fit` evaluated on the regressor columns of `data`."""
    X = _design(data, fit.regressors)
    return pd.Series(fit.results.predict(X), index=data.index, name=f"{fit.response}_fitted")
