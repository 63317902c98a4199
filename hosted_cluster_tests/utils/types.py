import pathlib as pl
import typing as tp

FileType = str | pl.Path
# Kubernetes objects are passed around as decoded JSON
KubeObject = dict[str, tp.Any]
KubeObjectList = list[KubeObject]
