# flowmigrate/bulk.py
"""
Convert many exported n8n workflows in one go.

`bulk_convert` works on in-memory (id, workflow) pairs; `bulk_convert_files`
reads a folder of exports first. One bad workflow never stops the batch.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from flowmigrate.config import ConversionOptions
from flowmigrate.engine import convert, validate
from flowmigrate.errors import FlowMigrateError
from flowmigrate.utils.io import PathLike, list_workflow_files, read_json
from flowmigrate.utils.logger import get_logger

logger = get_logger("bulk")


def unwrap_export(payload: Any) -> Any:
    """API responses wrap the workflow as {"data": {...}}; plain exports are returned as-is."""
    if isinstance(payload, dict) and "nodes" not in payload and isinstance(payload.get("data"), dict):
        return payload["data"]
    return payload


def convert_one(workflow_id: str, workflow: Any, options: Optional[ConversionOptions] = None) -> Dict[str, Any]:
    workflow = unwrap_export(workflow)
    validation = validate(workflow)
    if not validation["valid"]:
        logger.warning(f"[{workflow_id}] invalid workflow: {validation['error']}")
        return {"id": workflow_id, "success": False, "error": validation["error"]}

    try:
        converted = convert(workflow, options)
    except FlowMigrateError as e:
        logger.warning(f"[{workflow_id}] {e}")
        return {"id": workflow_id, "success": False, "error": str(e)}

    analysis = converted["analysis"]
    return {
        "id": workflow_id,
        "success": True,
        "workflow": converted,
        "summary": {
            "totalNodes": analysis["totalNodes"],
            "convertedNodes": analysis["convertedNodes"],
            "authRequired": analysis["authRequiredCount"],
            "authProviders": list(analysis["authProviders"]),
        },
    }


def summarize(results: List[Dict[str, Any]]) -> Dict[str, int]:
    summary = {"total": len(results), "successful": 0, "failed": 0,
               "totalNodes": 0, "convertedNodes": 0, "authRequired": 0}
    for r in results:
        if not r["success"]:
            summary["failed"] += 1
            continue
        summary["successful"] += 1
        summary["totalNodes"] += r["summary"]["totalNodes"]
        summary["convertedNodes"] += r["summary"]["convertedNodes"]
        summary["authRequired"] += r["summary"]["authRequired"]
    return summary


# ---------- Public API ----------

def bulk_convert(
    items: Iterable[Tuple[str, Any]],
    options: Optional[ConversionOptions] = None,
) -> Dict[str, Any]:
    results = [convert_one(wid, wf, options) for wid, wf in items]
    summary = summarize(results)
    logger.info(
        f"Bulk conversion: {summary['successful']}/{summary['total']} succeeded, "
        f"{summary['failed']} failed"
    )
    return {"results": results, "summary": summary}


def bulk_convert_files(
    folder: PathLike,
    pattern: str = "*.json",
    options: Optional[ConversionOptions] = None,
) -> Dict[str, Any]:
    """Every matching file in `folder` is one workflow; the file stem is its id."""
    results = []
    for fp in list_workflow_files(folder, pattern):
        try:
            payload = read_json(fp)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"[{fp.stem}] cannot read {fp}: {e}")
            results.append({"id": fp.stem, "success": False, "error": f"Invalid JSON format: {e}"})
            continue
        results.append(convert_one(fp.stem, payload, options))

    summary = summarize(results)
    logger.info(f"Bulk conversion of {folder}: {summary['successful']}/{summary['total']} succeeded")
    return {"results": results, "summary": summary}


def results_frame(results: List[Dict[str, Any]]) -> pd.DataFrame:
    """One row per workflow, for the CSV summary."""
    rows = []
    for r in results:
        s = r.get("summary") or {}
        rows.append({
            "id": r["id"],
            "success": r["success"],
            "error": r.get("error", ""),
            "totalNodes": s.get("totalNodes", 0),
            "convertedNodes": s.get("convertedNodes", 0),
            "authRequired": s.get("authRequired", 0),
            "authProviders": ";".join(s.get("authProviders", [])),
        })
    return pd.DataFrame(rows, columns=["id", "success", "error", "totalNodes",
                                       "convertedNodes", "authRequired", "authProviders"])
