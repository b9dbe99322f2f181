def pytest_benchmark_scale_unit(config, unit, benchmarks, best, worst, sort):
    prefix = ""
    scale = 1.0

    if unit == "operations":
        prefix = "MiB/s "
        for benchmark in benchmarks:
            input_size = benchmark["params"].get("input_size")
            if not input_size:
                continue
            benchmark["ops"] *= input_size / 1024 / 1024
            benchmark["scaled"] = True

    return prefix, scale
