import os
import shutil
import pytest
from basketminer.MapReduce.Job import Job, Mapper, Reducer, hashPartitioner
from basketminer.MapReduce.LocalRunner import LocalJobRunner, splitInput
from basketminer.Mining.CandidateMining import SumCombiner
from basketminer.Mining.Driver import AssociationRules
from conftest import writeBaskets, readRecords, readRuleLines


class WordMapper(Mapper):
    def map(self,line,context):
        for word in line.split():
            context.write(word,1)
            context.increment("WORDS")


class CountReducer(Reducer):
    def reduce(self,key,values,context):
        context.write(key,sum(values))


def test_split_input():
    lines=[str(i) for i in range(10)]
    splits=splitInput(lines,3)
    assert [len(s) for s in splits]==[4,3,3]
    assert sum(splits,[])==lines
    assert splitInput(lines[:2],5)==[["0"],["1"]]
    assert splitInput([],4)==[[]]


def test_hash_partitioner_is_deterministic():
    assert hashPartitioner("1;2",7)==hashPartitioner("1;2",7)
    assert 0<=hashPartitioner("abc",3)<3


@pytest.mark.parametrize("numWorkers",[1,2])
def test_local_runner_word_count(tmp_path,numWorkers):
    inputPath=writeBaskets(tmp_path/"words.txt",["a b a","c a","b"])
    job=Job("wordcount",{},WordMapper,CountReducer,combinerClass=SumCombiner,numReducers=2)
    runner=LocalJobRunner(numWorkers=numWorkers,numMapTasks=3)

    result=runner.run(job,inputPath,str(tmp_path/"counts"))

    assert readRecords(result.outputPath)=={"a":"3","b":"2","c":"1"}
    assert sorted(os.listdir(result.outputPath))==["part-r-00000","part-r-00001"]
    assert result.getCounter("WORDS")==6


def test_local_runner_replaces_previous_output(tmp_path):
    inputPath=writeBaskets(tmp_path/"words.txt",["a"])
    outputPath=tmp_path/"counts"
    outputPath.mkdir()
    (outputPath/"part-r-00009").write_text("stale\t1\n")

    job=Job("wordcount",{},WordMapper,CountReducer,numReducers=1)
    LocalJobRunner().run(job,inputPath,str(outputPath))
    assert readRecords(str(outputPath))=={"a":"1"}


def _sparkAvailable():
    try:
        import pyspark
    except ImportError:
        return False
    return shutil.which("java") is not None


@pytest.mark.skipif(not _sparkAvailable(),reason="needs pyspark and a java runtime")
def test_spark_runner_end_to_end(config,sampleBaskets,outputDir):
    import pyspark
    from basketminer.MapReduce.SparkRunner import SparkJobRunner

    sc=pyspark.SparkContext.getOrCreate(pyspark.SparkConf().setMaster("local[2]").setAppName("basketminer-test"))
    try:
        result=AssociationRules(config,runner=SparkJobRunner(sc,numMapTasks=2)).run(sampleBaskets,outputDir)
    finally:
        sc.stop()

    assert result.maxK==3
    rules=readRuleLines(outputDir)
    assert rules.count("{a}->{b}\t0.75")==1
    assert len(rules)==12
