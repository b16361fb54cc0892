import math
import random

import pytest

SITES_HEADER = "Index,Name,Street,HouseNumber,ZipCode,City,Latitude,Longitude\n"

SAMPLE_SITES = [
    "1,Munich,Marienplatz,8,80331,München,48.1374,11.5755",
    "2,Berlin,Alexanderplatz,1,10178,Berlin,52.5219,13.4132",
    "3,Hamburg,Rathausmarkt,1,20095,Hamburg,53.5503,9.9920",
    "4,Cologne,Domkloster,4,50667,Köln,50.9413,6.9583",
    "5,Frankfurt,Römerberg,23,60311,Frankfurt am Main,50.1106,8.6820",
]


def random_matrix(n, seed, symmetric=False):
    rng = random.Random(seed)
    matrix = [[0.0] * n for _ in range(n)]
    for i in range(n):
        for j in range(n):
            if i == j:
                continue
            if symmetric and j < i:
                matrix[i][j] = matrix[j][i]
            else:
                matrix[i][j] = round(rng.uniform(1, 100), 3)
    return matrix


@pytest.fixture
def unit_square():
    d = math.sqrt(2)
    return [
        [0.0, 1.0, d, 1.0],
        [1.0, 0.0, 1.0, d],
        [d, 1.0, 0.0, 1.0],
        [1.0, d, 1.0, 0.0],
    ]


@pytest.fixture
def asymmetric_matrix():
    return [
        [0.0, 1.0, 15.0, 6.0],
        [2.0, 0.0, 7.0, 3.0],
        [9.0, 6.0, 0.0, 12.0],
        [10.0, 4.0, 8.0, 0.0],
    ]


@pytest.fixture
def sites_csv(tmp_path):
    path = tmp_path / "sites.csv"
    path.write_text(SITES_HEADER + "\n".join(SAMPLE_SITES) + "\n", encoding="utf-8")
    return path
