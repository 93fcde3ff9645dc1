"""ML benchmarking pipeline predicting whether a work session will be highly productive."""

from __future__ import annotations

from typing import Any

import numpy as np
from sklearn.ensemble import GradientBoostingClassifier, RandomForestClassifier
from sklearn.linear_model import LogisticRegression
from sklearn.metrics import accuracy_score, f1_score, roc_auc_score
from sklearn.model_selection import StratifiedKFold, cross_validate, train_test_split
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from focus_engine.ledger import Ledger
from focus_engine.patterns import HIGH_PRODUCTIVITY, Observation, collect_observations
from focus_engine.schema import PRIORITIES, STATUSES, Task


def _normalize_category(category: str | None) -> str:
    if category is None:
        return "unknown"
    normalized = str(category).strip()
    return normalized or "unknown"


def _row(obs: Observation, categories: list[str]) -> list[float]:
    task = obs.task
    priority = task.priority if task else None
    status = task.status if task else None
    category = _normalize_category(task.category if task else None)

    row = [float(obs.hour), float(obs.weekday), float(obs.session_minutes or 0.0)]
    row.extend(1.0 if priority == value else 0.0 for value in PRIORITIES)
    row.extend(1.0 if status == value else 0.0 for value in STATUSES)
    row.extend(1.0 if category == value else 0.0 for value in categories)
    return row


def build_training_table(tasks: list[Task], ledger: Ledger) -> tuple[np.ndarray, np.ndarray, list[str]]:
    """Build a sample-level table (X, y, feature_names); y is 1 for productivity above 70."""

    observations = collect_observations(tasks, ledger)
    if not observations:
        return np.empty((0, 0)), np.array([], dtype=int), []

    categories = sorted({_normalize_category(obs.task.category if obs.task else None) for obs in observations})
    feature_names = ["hour_of_day", "weekday", "session_minutes"]
    feature_names += [f"priority={value}" for value in PRIORITIES]
    feature_names += [f"status={value}" for value in STATUSES]
    feature_names += [f"category={value}" for value in categories]

    rows = [_row(obs, categories) for obs in observations]
    labels = [1 if obs.productivity > HIGH_PRODUCTIVITY else 0 for obs in observations]
    return np.asarray(rows, dtype=float), np.asarray(labels, dtype=int), feature_names


def _make_models(seed: int) -> dict[str, Any]:
    return {
        "LogisticRegression": Pipeline(
            [
                ("scaler", StandardScaler()),
                ("clf", LogisticRegression(max_iter=1000, random_state=seed)),
            ]
        ),
        "RandomForest": RandomForestClassifier(n_estimators=100, random_state=seed),
        "GradientBoosting": GradientBoostingClassifier(random_state=seed),
    }


def _safe_roc_auc(y_true: np.ndarray, scores: np.ndarray) -> float:
    if len(np.unique(y_true)) < 2:
        return 0.5
    return float(roc_auc_score(y_true, scores))


def benchmark_models(X: np.ndarray, y: np.ndarray, seed: int = 42) -> dict:
    """Benchmark candidate models with a stratified split and CV.

    Single-class or tiny tables skip CV and report neutral scores instead.
    """

    if len(X) == 0 or len(y) == 0:
        return {"models": {}, "best_model": None}
    if len(np.unique(y)) < 2:
        return {"models": {}, "best_model": None, "reason": "single_class"}

    models = _make_models(seed)
    class_counts = np.bincount(y)
    can_stratify = int(class_counts.min()) >= 2 and len(y) >= 4
    X_train, X_test, y_train, y_test = train_test_split(
        X,
        y,
        test_size=0.25,
        random_state=seed,
        stratify=y if can_stratify else None,
    )

    train_classes = len(np.unique(y_train))
    min_class_count = int(np.bincount(y_train).min()) if train_classes > 1 else 1
    cv_folds = max(2, min(5, min_class_count))
    cv = StratifiedKFold(n_splits=cv_folds, shuffle=True, random_state=seed)

    report: dict[str, Any] = {"models": {}}
    scoring = {"roc_auc": "roc_auc", "f1": "f1", "accuracy": "accuracy"}

    for name, model in models.items():
        model_metrics: dict[str, Any] = {}

        if train_classes > 1 and min_class_count >= 2:
            cv_scores = cross_validate(model, X_train, y_train, cv=cv, scoring=scoring)
            model_metrics["cv"] = {
                metric: {
                    "mean": float(np.mean(cv_scores[f"test_{metric}"])),
                    "std": float(np.std(cv_scores[f"test_{metric}"])),
                }
                for metric in ("roc_auc", "f1", "accuracy")
            }
        else:
            model_metrics["cv"] = {
                "roc_auc": {"mean": 0.5, "std": 0.0},
                "f1": {"mean": 0.0, "std": 0.0},
                "accuracy": {"mean": float(np.mean(y_train == y_train[0])), "std": 0.0},
            }

        if train_classes < 2:
            report["models"][name] = model_metrics
            continue

        fitted = model.fit(X_train, y_train)
        y_pred = fitted.predict(X_test)
        y_score = fitted.predict_proba(X_test)[:, 1]
        model_metrics["test"] = {
            "roc_auc": _safe_roc_auc(y_test, y_score),
            "f1": float(f1_score(y_test, y_pred, zero_division=0)),
            "accuracy": float(accuracy_score(y_test, y_pred)),
        }
        report["models"][name] = model_metrics

    ranked = sorted(
        report["models"].items(),
        key=lambda item: item[1]["cv"]["roc_auc"]["mean"],
        reverse=True,
    )
    report["ranking"] = [
        {"model": name, "cv_roc_auc_mean": metrics["cv"]["roc_auc"]["mean"]} for name, metrics in ranked
    ]
    report["best_model"] = ranked[0][0] if ranked else None
    return report


def train_best_model(X: np.ndarray, y: np.ndarray) -> tuple[Any, dict]:
    """Train the best-performing model (by CV ROC-AUC) on the full table."""

    report = benchmark_models(X, y, seed=42)
    best_name = report.get("best_model")
    if best_name is None:
        raise ValueError("Cannot train a model without both productive and unproductive sessions")

    model = _make_models(seed=42)[best_name]
    model.fit(X, y)
    return model, report


def predict_productive_hours(model: Any, tasks: list[Task], ledger: Ledger, task: Task) -> dict[int, float]:
    """Probability that a session on ``task`` is highly productive, for each hour 0-23."""

    X, _, feature_names = build_training_table(tasks, ledger)
    if X.size == 0:
        return {}
    categories = [name.split("=", 1)[1] for name in feature_names if name.startswith("category=")]
    anchor = task.created_at or task.deadline
    weekday = anchor.weekday() if anchor is not None else 0
    record = ledger.time_spent(task.id)
    minutes = record.total / len(record.sessions) if record.sessions else None
    rows = [
        _row(Observation(task.id, hour, weekday, 0, minutes, task), categories)
        for hour in range(24)
    ]
    probabilities = model.predict_proba(np.asarray(rows, dtype=float))[:, 1]
    return {hour: float(p) for hour, p in enumerate(probabilities)}
