import argparse
import asyncio
import json

from algorithms import MathTools, WeightConverter
from client import ScheduleClient
from config import load_settings
from exceptions import WorkoutFetchError
from log_config import setup_logger
from localization import translator
from merge_service import DuplicatePolicy, SetMergeEngine
from models import WorkoutView
from rest_timer import RestTimer
from save_service import SAVE_FAILED, SAVED, BatchedSaveCoordinator
from settings_schema import SettingsSchema
from stats_service import StatisticsService
from workout_loader import WorkoutInitializer
from workout_session import WorkoutSession


def read_source(path: str):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def format_workout(workout: WorkoutView, use_metric: bool = True) -> str:
    lines = [f"{workout.day or 'Workout'} ({workout.category or '-'})"]
    for ex in workout.exercises:
        lines.append(f"  {ex.name} [{ex.status.value}]")
        for s in ex.sets:
            reps = s.reps if s.reps is not None else "-"
            weight = WeightConverter.display(s.weight_kg, use_metric)
            lines.append(f"    {s.set_number}. {reps} x {weight}  {s.status.value}")
    summary = StatisticsService.progress(workout)
    lines.append(
        f"Progress: {summary.completed_sets}/{summary.total_sets} sets ({summary.percentage}%)"
    )
    volume = StatisticsService.completed_volume(workout)
    lines.append(f"Volume: {MathTools.format_number(volume)}kg")
    return "\n".join(lines)


def show_workout(path: str, engine: SetMergeEngine, use_metric: bool) -> None:
    workout = WorkoutInitializer(engine).from_source(read_source(path))
    print(format_workout(workout, use_metric))


def export_performed(path: str, out_path: str, engine: SetMergeEngine) -> None:
    workout = WorkoutInitializer(engine).from_source(read_source(path))
    rows = engine.performed_sets(workout)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(rows, f, indent=2)
    print(f"Exported {len(rows)} sets to {out_path}")


async def fetch_workout(
    url: str, token: str | None, day: int | None, engine: SetMergeEngine, use_metric: bool
) -> int:
    client = ScheduleClient(url, token=token)
    try:
        workout = await WorkoutInitializer(engine).load_latest(client, target_day=day)
    except WorkoutFetchError as e:
        print(translator.gettext(str(e)))
        return 1
    print(format_workout(workout, use_metric))
    return 0


async def record_set(
    client: ScheduleClient,
    settings: SettingsSchema,
    engine: SetMergeEngine,
    schedule_id: int,
    set_number: int,
    reps: str | None = None,
    weight: str | None = None,
    day: int | None = None,
) -> int:
    """Complete one set of the latest workout and save it."""
    try:
        workout = await WorkoutInitializer(engine).load_latest(client, target_day=day)
    except WorkoutFetchError as e:
        print(translator.gettext(str(e)))
        return 1
    session = WorkoutSession(
        workout,
        BatchedSaveCoordinator(client, atomic=settings.atomic_save),
        use_metric=settings.use_metric,
        rest_timer=RestTimer(settings.default_rest_seconds),
        engine=engine,
    )
    if session.find_set(schedule_id, set_number) is None:
        print(translator.gettext("The requested workout was not found."))
        return 1
    if reps is not None:
        session.edit_set(schedule_id, set_number, "reps", reps)
    if weight is not None:
        session.edit_set(schedule_id, set_number, "weight", weight)
    session.start_set(schedule_id, set_number)
    session.complete_set(schedule_id, set_number)
    result = await session.save()
    print(translator.gettext(SAVED if result.success else SAVE_FAILED))
    return 0 if result.success else 1


def main() -> None:
    parser = argparse.ArgumentParser(description="Workout session utilities")
    parser.add_argument("--settings", default="settings.yaml")
    sub = parser.add_subparsers(dest="cmd", required=True)

    show = sub.add_parser("show")
    show.add_argument("--file", required=True)
    show.add_argument("--imperial", action="store_true")

    exp = sub.add_parser("export")
    exp.add_argument("--file", required=True)
    exp.add_argument("--out", default="performed_sets.json")

    fetch = sub.add_parser("fetch")
    fetch.add_argument("--day", type=int, default=None)
    fetch.add_argument("--imperial", action="store_true")

    rec = sub.add_parser("record")
    rec.add_argument("--schedule-id", type=int, required=True)
    rec.add_argument("--set", dest="set_number", type=int, required=True)
    rec.add_argument("--reps", default=None)
    rec.add_argument("--weight", default=None)
    rec.add_argument("--day", type=int, default=None)

    serve = sub.add_parser("serve")
    serve.add_argument("--db", default="workout.db")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=3000)

    conv = sub.add_parser("convert")
    conv.add_argument("--weight", type=float, required=True)
    conv.add_argument("--unit", choices=["kg", "lb"], required=True)

    args = parser.parse_args()
    settings = load_settings(args.settings)
    setup_logger(settings.log_level, settings.log_file)
    translator.set_language(settings.language)
    engine = SetMergeEngine(
        DuplicatePolicy(settings.duplicate_policy), settings.default_sets_count
    )
    use_metric = settings.use_metric and not getattr(args, "imperial", False)

    if args.cmd == "show":
        show_workout(args.file, engine, use_metric)
    elif args.cmd == "export":
        export_performed(args.file, args.out, engine)
    elif args.cmd == "fetch":
        code = asyncio.run(
            fetch_workout(settings.api_url, settings.api_token, args.day, engine, use_metric)
        )
        raise SystemExit(code)
    elif args.cmd == "record":
        client = ScheduleClient(settings.api_url, token=settings.api_token)
        code = asyncio.run(
            record_set(
                client,
                settings,
                engine,
                args.schedule_id,
                args.set_number,
                args.reps,
                args.weight,
                args.day,
            )
        )
        raise SystemExit(code)
    elif args.cmd == "serve":
        import uvicorn
        from rest_api import create_app

        uvicorn.run(create_app(args.db), host=args.host, port=args.port)
    elif args.cmd == "convert":
        if args.unit == "kg":
            print(f"{args.weight} kg = {WeightConverter.kg_to_lbs_display(args.weight)} lb")
        else:
            print(f"{args.weight} lb = {WeightConverter.lbs_to_kg(args.weight)} kg")


if __name__ == "__main__":
    main()
