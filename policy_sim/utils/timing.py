import time
import logging
import functools
import os

from policy_sim.utils.logger_manager import LOGGER_NAME


def _get_logger():
    return logging.getLogger(LOGGER_NAME)

# 任务与耗时的简单汇总
tasks = []

def add_task(task_name: str, time_taken: float):
    tasks.append((task_name, time_taken))

def record_time_decorator(task_name: str):
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            st = time.perf_counter()
            result = func(*args, **kwargs)
            total_time = round(time.perf_counter() - st, 4)
            _get_logger().info("%s running time: %s seconds", task_name, total_time)
            add_task(task_name=task_name, time_taken=total_time)
            return result
        return wrapper
    return decorator

def out_profile(output_folder: str) -> str:
    os.makedirs(output_folder, exist_ok=True)
    path = os.path.join(output_folder, "time_profile.txt")
    with open(path, "w", encoding="utf-8") as file:
        for task, time_taken in tasks:
            file.write(f"{task}: {time_taken}\n")
    return path
