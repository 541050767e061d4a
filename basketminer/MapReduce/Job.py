import collections
import zlib


class TaskContext(object):
    """
    per task state handed to every mapper/reducer call: the job configuration,
    the task's partition index, its output buffer and its counters
    """
    def __init__(self,conf,partition=0,numPartitions=1):
        self.conf=conf
        self.partition=partition
        self.numPartitions=numPartitions
        self.counters=collections.Counter()
        self.output=[]

    def write(self,key,value):
        self.output.append((key,value))

    def increment(self,counter,amount=1):
        self.counters[counter]+=amount

    def getCounter(self,counter):
        return self.counters[counter]

    def drain(self):
        output=self.output
        self.output=[]
        return output


class Mapper(object):
    def setup(self,context:TaskContext):
        pass

    def map(self,line,context:TaskContext):
        raise NotImplementedError

    def cleanup(self,context:TaskContext):
        pass


class Reducer(object):
    def setup(self,context:TaskContext):
        pass

    def reduce(self,key,values,context:TaskContext):
        raise NotImplementedError

    def cleanup(self,context:TaskContext):
        pass


def hashPartitioner(key,numPartitions):
    return zlib.crc32(str(key).encode("utf-8"))%numPartitions


class Job(object):
    def __init__(self,name,conf,mapperClass,reducerClass,combinerClass=None,
                 partitioner=hashPartitioner,numReducers=1):
        self.name=name
        self.conf=conf
        self.mapperClass=mapperClass
        self.reducerClass=reducerClass
        self.combinerClass=combinerClass
        self.partitioner=partitioner
        self.numReducers=numReducers

    def __repr__(self):
        return "Job({}, mapper={}, combiner={}, reducer={}, reducers={})".format(
            self.name,self.mapperClass.__name__,
            self.combinerClass.__name__ if self.combinerClass else None,
            self.reducerClass.__name__,self.numReducers)


class JobResult(object):
    def __init__(self,job:Job,outputPath,counters):
        self.job=job
        self.outputPath=outputPath
        self.counters=counters

    def getCounter(self,counter):
        return self.counters.get(counter,0)


def groupSorted(pairs):
    "sorted (key,[values]) groups of a list of (key,value) pairs"
    groups=collections.defaultdict(list)
    for key,value in pairs:
        groups[key].append(value)
    for key in sorted(groups.keys()):
        yield key,groups[key]


def runMapper(job:Job,lines,partition,numPartitions):
    "one map task plus its combiner; returns the (key,value) pairs and the task counters"
    context=TaskContext(job.conf,partition,numPartitions)
    mapper=job.mapperClass()
    mapper.setup(context)
    for line in lines:
        mapper.map(line,context)
    mapper.cleanup(context)
    output=context.drain()

    if job.combinerClass is not None:
        combiner=job.combinerClass()
        combiner.setup(context)
        for key,values in groupSorted(output):
            combiner.reduce(key,values,context)
        combiner.cleanup(context)
        output=context.drain()

    return output,context.counters


def runReducer(job:Job,groups,partition):
    "one reduce task over sorted (key,[values]) groups; returns the written pairs and counters"
    context=TaskContext(job.conf,partition,job.numReducers)
    reducer=job.reducerClass()
    reducer.setup(context)
    for key,values in groups:
        reducer.reduce(key,values,context)
    reducer.cleanup(context)
    return context.drain(),context.counters
